"""Numeric component types for the geometric primitives.

Every vector, point, normal and bounding box carries one component type drawn
from a small closed set: 16- and 32-bit signed integers and 32-bit floats.
Components are stored as NumPy scalars of that type so the width survives
arithmetic.

Integer arithmetic is carried out on Python ints and range-checked when the
result is stored, so overflow and division by zero fail immediately. Float
arithmetic follows IEEE-754 single precision: dividing by zero produces
infinities and NaN instead of raising, and NumPy's floating point warnings are
suppressed for these operations.

Example:
    >>> import numpy as np
    >>> from pbrtcore.core import numeric
    >>> numeric.infer([1, 2.5])
    <class 'numpy.float32'>
    >>> int(numeric.divide(7, -2, np.int32))
    -3
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Iterable
from typing import Any, Union

import numpy as np

ComponentType = type[np.generic]
Scalar = Union[int, float, np.integer, np.floating]

# Supported component types, narrowest integer first
COMPONENT_TYPES: tuple[ComponentType, ...] = (np.int16, np.int32, np.float32)

# Types picked when components are given as plain Python numbers
DEFAULT_FLOAT: ComponentType = np.float32
DEFAULT_INT: ComponentType = np.int32


def component_type(dtype: Any) -> ComponentType:
    """Resolve a dtype-like value to one of the supported component types.

    Args:
        dtype: A NumPy scalar type, ``numpy.dtype`` or dtype string.

    Returns:
        The matching entry of ``COMPONENT_TYPES``.

    Raises:
        TypeError: If the value does not name a supported component type.
    """
    if dtype is None:
        raise TypeError("Component type must not be None")
    try:
        resolved = np.dtype(dtype).type
    except TypeError as exc:
        raise TypeError(f"Unsupported component type: {dtype!r}") from exc
    if resolved not in COMPONENT_TYPES:
        names = ", ".join(np.dtype(t).name for t in COMPONENT_TYPES)
        raise TypeError(
            f"Unsupported component type {np.dtype(resolved).name}; expected one of {names}"
        )
    return resolved


def is_float(dtype: ComponentType) -> bool:
    """Check whether a component type is the floating-point type."""
    return dtype is np.float32


def is_scalar(value: Any) -> bool:
    """Check whether a value can act as a real scalar (bools excluded)."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def infer(values: Iterable[Any]) -> ComponentType:
    """Infer the component type for a set of raw component values.

    Any float value selects ``DEFAULT_FLOAT``. Integers keep their NumPy type
    when all of them share one supported integer type, otherwise they
    become ``DEFAULT_INT``.

    Raises:
        TypeError: If a value is not a real scalar.
    """
    integer_types = set()
    for value in values:
        if not is_scalar(value):
            raise TypeError(f"Components must be real scalars, got {type(value).__name__}")
        if isinstance(value, (float, np.floating)):
            return DEFAULT_FLOAT
        if type(value) in COMPONENT_TYPES:
            integer_types.add(type(value))
        else:
            integer_types.add(DEFAULT_INT)
    if len(integer_types) == 1:
        return integer_types.pop()
    return DEFAULT_INT


def _checked_int(value: int, dtype: ComponentType) -> np.integer:
    info = np.iinfo(dtype)
    if not info.min <= value <= info.max:
        raise OverflowError(f"{value} does not fit in {np.dtype(dtype).name}")
    return dtype(value)


def coerce(value: Any, dtype: ComponentType) -> np.generic:
    """Store a scalar as the given component type without losing information.

    Raises:
        TypeError: If the value is not a scalar, or a non-integral value is
            stored in an integer component.
        OverflowError: If an integer value is outside the component range.
    """
    if not is_scalar(value):
        raise TypeError(f"Components must be real scalars, got {type(value).__name__}")
    if is_float(dtype):
        with np.errstate(all="ignore"):
            return np.float32(value)
    if isinstance(value, (float, np.floating)):
        if not math.isfinite(value) or not float(value).is_integer():
            raise TypeError(
                f"Cannot store non-integral value {value!r} in a {np.dtype(dtype).name} component"
            )
    return _checked_int(int(value), dtype)


def convert(value: Any, dtype: ComponentType) -> np.generic:
    """Explicitly convert a scalar, truncating floats toward zero for integers.

    Raises:
        ValueError: If a non-finite float is converted to an integer type.
        OverflowError: If the converted value is outside the component range.
    """
    if is_float(dtype) or not isinstance(value, (float, np.floating)):
        return coerce(value, dtype)
    if not math.isfinite(value):
        raise ValueError(f"Cannot convert {value} to a {np.dtype(dtype).name} component")
    return _checked_int(math.trunc(float(value)), dtype)


def to_float(value: Any) -> np.float32:
    """Promote a component to the floating-point type."""
    return np.float32(value)


def _binary(op: Callable[[Any, Any], Any], a: Any, b: Any, dtype: ComponentType) -> np.generic:
    if is_float(dtype):
        with np.errstate(all="ignore"):
            return np.float32(op(np.float32(a), np.float32(b)))
    return _checked_int(op(int(a), int(b)), dtype)


def _unary(op: Callable[[Any], Any], a: Any, dtype: ComponentType) -> np.generic:
    if is_float(dtype):
        with np.errstate(all="ignore"):
            return np.float32(op(np.float32(a)))
    return _checked_int(op(int(a)), dtype)


def add(a: Any, b: Any, dtype: ComponentType) -> np.generic:
    return _binary(operator.add, a, b, dtype)


def subtract(a: Any, b: Any, dtype: ComponentType) -> np.generic:
    return _binary(operator.sub, a, b, dtype)


def multiply(a: Any, b: Any, dtype: ComponentType) -> np.generic:
    return _binary(operator.mul, a, b, dtype)


def divide(a: Any, b: Any, dtype: ComponentType) -> np.generic:
    """Divide two components.

    Integer division truncates toward zero. Float division by zero yields
    an infinity or NaN.

    Raises:
        ZeroDivisionError: If an integer component is divided by zero.
    """
    if is_float(dtype):
        return _binary(operator.truediv, a, b, dtype)
    a, b = int(a), int(b)
    if b == 0:
        raise ZeroDivisionError(f"{np.dtype(dtype).name} component division by zero")
    quotient = abs(a) // abs(b)
    return _checked_int(-quotient if (a < 0) != (b < 0) else quotient, dtype)


def negate(a: Any, dtype: ComponentType) -> np.generic:
    return _unary(operator.neg, a, dtype)


def absolute(a: Any, dtype: ComponentType) -> np.generic:
    return _unary(abs, a, dtype)


def minimum(a: Any, b: Any, dtype: ComponentType) -> np.generic:
    """Smaller of two components. For floats a NaN operand is ignored."""
    if is_float(dtype):
        return np.float32(np.fmin(np.float32(a), np.float32(b)))
    return dtype(min(int(a), int(b)))


def maximum(a: Any, b: Any, dtype: ComponentType) -> np.generic:
    """Larger of two components. For floats a NaN operand is ignored."""
    if is_float(dtype):
        return np.float32(np.fmax(np.float32(a), np.float32(b)))
    return dtype(max(int(a), int(b)))


def sqrt(value: Any) -> np.float32:
    """Single-precision square root; negative input gives NaN."""
    with np.errstate(all="ignore"):
        return np.float32(np.sqrt(np.float32(value)))


def lowest(dtype: ComponentType) -> np.generic:
    """Lowest representable component value (-inf for floats)."""
    if is_float(dtype):
        return np.float32(-np.inf)
    return dtype(np.iinfo(dtype).min)


def highest(dtype: ComponentType) -> np.generic:
    """Highest representable component value (+inf for floats)."""
    if is_float(dtype):
        return np.float32(np.inf)
    return dtype(np.iinfo(dtype).max)
