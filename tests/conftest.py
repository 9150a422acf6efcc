"""Shared fixtures for the pbrtcore test suite."""

import numpy as np
import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Start a CPU Taichi runtime for the device tests.

    ``ti.init`` resets the runtime, so it runs once and every kernel compiled
    by the suite shares the same program.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def rng():
    """Seeded random generator for property checks."""
    return np.random.default_rng(42)
