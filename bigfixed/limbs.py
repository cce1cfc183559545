"""Limb store primitives.

A magnitude is a list of unsigned LIMB_BITS-wide integers, least significant
limb first. A normalized list has no most significant zero limb, so zero is
the empty list.

These functions know nothing about precision or sign; FixedPoint layers the
binary point and the sign flag on top of them.
"""

from __future__ import annotations

from bigfixed.constants import LIMB_BASE, LIMB_BITS, LIMB_MASK
from bigfixed.errors import NegativeShiftError

__all__ = [
    "normalize",
    "from_unsigned",
    "bit_length",
    "has_low_bits",
    "shift_left",
    "shift_right",
    "add_magnitudes",
    "sub_magnitudes",
    "mul_magnitudes",
]


def normalize(limbs: list[int]) -> list[int]:
    """Drop most significant zero limbs in place and return the list."""
    while limbs and limbs[-1] == 0:
        limbs.pop()
    return limbs


def from_unsigned(value: int) -> list[int]:
    """Split a non-negative integer into a normalized limb list.

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError(f"Magnitude cannot be negative: {value}")
    limbs = []
    while value:
        limbs.append(value & LIMB_MASK)
        value >>= LIMB_BITS
    return limbs


def bit_length(limbs: list[int]) -> int:
    """Number of bits up to and including the most significant set bit."""
    if not limbs:
        return 0
    return (len(limbs) - 1) * LIMB_BITS + limbs[-1].bit_length()


def has_low_bits(limbs: list[int], count: int) -> bool:
    """True if any of the lowest `count` bits of the magnitude is set."""
    whole, bits = divmod(count, LIMB_BITS)
    if any(limbs[:whole]):
        return True
    if bits and whole < len(limbs):
        return bool(limbs[whole] & ((1 << bits) - 1))
    return False


# =============================================================================
# Shift engine
# =============================================================================


def shift_left(limbs: list[int], shift: int) -> list[int]:
    """Multiply the magnitude by 2^shift in place.

    Whole limbs are inserted at the low end first, then the remaining
    `shift % LIMB_BITS` bits are rotated through every limb, carrying the
    overflow into a new top limb.

    Raises:
        NegativeShiftError: If shift is negative
    """
    if shift < 0:
        raise NegativeShiftError(f"Negative shift amount: {shift}")
    if not limbs:
        return limbs

    whole, bits = divmod(shift, LIMB_BITS)
    if whole:
        limbs[:0] = [0] * whole

    if bits:
        carry = 0
        for i, current in enumerate(limbs):
            limbs[i] = ((current << bits) & LIMB_MASK) | carry
            carry = current >> (LIMB_BITS - bits)
        if carry:
            limbs.append(carry)

    return normalize(limbs)


def shift_right(limbs: list[int], shift: int) -> list[int]:
    """Integer-divide the magnitude by 2^shift in place (truncating).

    Raises:
        NegativeShiftError: If shift is negative
    """
    if shift < 0:
        raise NegativeShiftError(f"Negative shift amount: {shift}")
    if not limbs:
        return limbs

    whole, bits = divmod(shift, LIMB_BITS)
    if whole >= len(limbs):
        limbs.clear()
        return limbs
    if whole:
        del limbs[:whole]

    if bits:
        carry = 0
        for i in range(len(limbs) - 1, -1, -1):
            current = limbs[i]
            limbs[i] = (current >> bits) | carry
            carry = (current << (LIMB_BITS - bits)) & LIMB_MASK

    return normalize(limbs)


# =============================================================================
# Magnitude arithmetic
# =============================================================================


def add_magnitudes(a: list[int], b: list[int]) -> list[int]:
    """Return a + b as a new normalized limb list."""
    size = max(len(a), len(b))
    # One guard limb for the final carry
    result = [0] * (size + 1)
    carry = 0
    for i in range(size):
        total = carry
        if i < len(a):
            total += a[i]
        if i < len(b):
            total += b[i]
        result[i] = total & LIMB_MASK
        carry = total >> LIMB_BITS
    result[size] = carry
    return normalize(result)


def sub_magnitudes(a: list[int], b: list[int]) -> list[int]:
    """Return a - b as a new normalized limb list.

    Raises:
        ValueError: If b is larger than a
    """
    result = list(a)
    borrow = 0
    for i in range(len(a)):
        diff = a[i] - borrow
        if i < len(b):
            diff -= b[i]
        if diff < 0:
            diff += LIMB_BASE
            borrow = 1
        else:
            borrow = 0
        result[i] = diff
    if borrow or len(b) > len(a):
        raise ValueError("Magnitude subtraction underflow")
    return normalize(result)


def mul_magnitudes(a: list[int], b: list[int]) -> list[int]:
    """Return a * b as a new normalized limb list (schoolbook)."""
    if not a or not b:
        return []

    result = [0] * (len(a) + len(b))
    for i, x in enumerate(a):
        if x == 0:
            continue
        carry = 0
        for j, y in enumerate(b):
            # Fits in two limbs: (B-1) + (B-1)^2 + (B-1) == B^2 - 1
            total = result[i + j] + x * y + carry
            result[i + j] = total & LIMB_MASK
            carry = total >> LIMB_BITS
        result[i + len(b)] = carry
    return normalize(result)
