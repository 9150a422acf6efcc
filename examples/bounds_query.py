#!/usr/bin/env python3
"""Run batched bounds queries on the Taichi device.

This script builds a set of random axis-aligned boxes, uploads them to the
device and reports which of them overlap a query box and which contain a
query point. The device answers are checked against the host functions.

Usage:
    python -m examples.bounds_query [options]

Options:
    --count COUNT       Number of random boxes (default: 1000)
    --extent EXTENT     Boxes are placed in [-EXTENT, EXTENT]^3 (default: 10.0)
    --seed SEED         Random seed (default: 0)
    --arch ARCH         Taichi backend, cpu or gpu (default: cpu)
    --verbose           Show debug logging from the device buffers

Example:
    python -m examples.bounds_query --count 5000 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run batched bounds queries on the Taichi device.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1000,
        help="Number of random boxes (default: 1000)",
    )
    parser.add_argument(
        "--extent",
        type=float,
        default=10.0,
        help="Boxes are placed in [-EXTENT, EXTENT]^3 (default: 10.0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging from the device buffers",
    )
    return parser.parse_args()


def random_boxes(count: int, extent: float, seed: int) -> list:
    """Generate boxes with random centers and sizes up to a tenth of the extent."""
    from pbrtcore.geometry import Bounds3, Point3f

    rng = np.random.default_rng(seed)
    centers = rng.uniform(-extent, extent, size=(count, 3))
    half_sizes = rng.uniform(0.0, extent / 10.0, size=(count, 3))
    return [
        Bounds3.from_points(Point3f(*(c - h)), Point3f(*(c + h)))
        for c, h in zip(centers, half_sizes)
    ]


def run_queries(count: int, extent: float, seed: int) -> int:
    """Run the device queries and compare them with the host.

    Returns:
        Exit code, 0 when the device and host agree.
    """
    from pbrtcore.device import BoundsBuffer
    from pbrtcore.geometry import Bounds3, Point3f, inside, overlaps, union

    boxes = random_boxes(count, extent, seed)
    query = Bounds3.from_scalars(-extent / 4.0, extent / 4.0)
    point = Point3f(0.0, 0.0, 0.0)

    start = time.time()
    buffer = BoundsBuffer(boxes)
    overlapping = buffer.overlapping(query)
    containing = buffer.containing(point)
    total = buffer.union_all()
    elapsed = time.time() - start

    print(f"Boxes:               {count}")
    print(f"Overlapping query:   {int(overlapping.sum())}")
    print(f"Containing origin:   {int(containing.sum())}")
    print(f"Union p_min:         {total.p_min}")
    print(f"Union p_max:         {total.p_max}")
    print(f"Device time:         {elapsed:.3f}s")

    host_overlapping = np.array([overlaps(b, query) for b in boxes])
    host_containing = np.array([inside(point, b) for b in boxes])
    host_total = boxes[0]
    for b in boxes[1:]:
        host_total = union(host_total, b)

    if not np.array_equal(overlapping, host_overlapping):
        print("Overlap results differ from host", file=sys.stderr)
        return 1
    if not np.array_equal(containing, host_containing):
        print("Containment results differ from host", file=sys.stderr)
        return 1
    if total != host_total:
        print("Union differs from host", file=sys.stderr)
        return 1
    print("Device results match host")
    return 0


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.count <= 0:
        print(f"Error: count must be positive, got {args.count}", file=sys.stderr)
        return 1
    if args.extent <= 0:
        print(f"Error: extent must be positive, got {args.extent}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    return run_queries(args.count, args.extent, args.seed)


if __name__ == "__main__":
    sys.exit(main())
