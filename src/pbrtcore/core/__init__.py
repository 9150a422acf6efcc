"""Shared numeric infrastructure.

Components:
    numeric: The closed set of component types, checked integer arithmetic
        and IEEE single-precision float arithmetic
    tuples: Generic two- and three-component tuples with indexing, scalar
        multiplication in both orders and numeric conversion
"""

from . import numeric
from .tuples import ComponentTuple, Tuple2, Tuple3, check_axis, maximum, minimum

__all__ = [
    "numeric",
    "ComponentTuple",
    "Tuple2",
    "Tuple3",
    "check_axis",
    "minimum",
    "maximum",
]
