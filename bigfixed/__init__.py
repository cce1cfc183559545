"""Arbitrary-precision signed fixed-point arithmetic.

This package provides:
- FixedPoint: exact fixed-point numbers with a 32-bit limb magnitude
- Error classes raised by FixedPoint operations
"""

from bigfixed.errors import (
    DivisionByZero,
    FixedPointError,
    InvalidFloatInput,
    NegativeShiftError,
)
from bigfixed.fixed_point import FixedPoint, align, divide

__version__ = "0.1.0"
__all__ = [
    "FixedPoint",
    "align",
    "divide",
    "FixedPointError",
    "DivisionByZero",
    "InvalidFloatInput",
    "NegativeShiftError",
    "__version__",
]
