"""Test helpers module for shared test utilities.

- value_of: exact value of a FixedPoint as a Fraction (Python int oracle)
- assert_normalized: checks the limb store invariants
"""

from fractions import Fraction

from bigfixed import FixedPoint
from bigfixed.constants import LIMB_BASE, LIMB_BITS

__all__ = ["value_of", "assert_normalized", "PI_50"]

# First 50 decimal places of pi
PI_50 = "3.14159265358979323846264338327950288419716939937510"


def value_of(x: FixedPoint) -> Fraction:
    """Exact value of x computed from its raw representation."""
    magnitude = sum(limb << (LIMB_BITS * i) for i, limb in enumerate(x.magnitude))
    value = Fraction(magnitude) * Fraction(2) ** -x.precision
    return -value if x.sign() < 0 else value


def assert_normalized(x: FixedPoint) -> None:
    """Magnitude has no top zero limb and zero is never negative."""
    magnitude = x.magnitude
    assert all(0 <= limb < LIMB_BASE for limb in magnitude)
    if magnitude:
        assert magnitude[-1] != 0
        assert x.sign() != 0
    else:
        assert x.sign() == 0
