"""Tests for the limb store primitives."""

import pytest

from bigfixed.constants import LIMB_MASK
from bigfixed.errors import NegativeShiftError
from bigfixed.limbs import (
    add_magnitudes,
    bit_length,
    from_unsigned,
    has_low_bits,
    mul_magnitudes,
    normalize,
    shift_left,
    shift_right,
    sub_magnitudes,
)


def to_int(limbs: list[int]) -> int:
    return sum(limb << (32 * i) for i, limb in enumerate(limbs))


class TestLimbStore:
    """Tests for normalization and integer conversion."""

    def test_normalize_drops_top_zeros(self):
        """Most significant zero limbs are removed in place."""
        limbs = [1, 0, 0]
        assert normalize(limbs) is limbs
        assert limbs == [1]

    def test_normalize_all_zero_is_empty(self):
        """An all-zero magnitude normalizes to the empty list."""
        assert normalize([0, 0]) == []

    def test_normalize_keeps_low_zeros(self):
        """Zero limbs below the top are significant."""
        assert normalize([0, 0, 3]) == [0, 0, 3]

    def test_from_unsigned(self):
        """Integers split into 32-bit limbs, least significant first."""
        assert from_unsigned(0) == []
        assert from_unsigned(LIMB_MASK) == [LIMB_MASK]
        assert from_unsigned(2**32) == [0, 1]
        assert from_unsigned(2**64 + 5) == [5, 0, 1]

    def test_from_unsigned_negative_raises(self):
        """Magnitudes cannot be negative."""
        with pytest.raises(ValueError, match="negative"):
            from_unsigned(-1)

    def test_bit_length(self):
        """Bit length counts up to the most significant set bit."""
        assert bit_length([]) == 0
        assert bit_length([1]) == 1
        assert bit_length([LIMB_MASK]) == 32
        assert bit_length([0, 1]) == 33

    def test_has_low_bits(self):
        """Detects set bits among the lowest `count` bits."""
        assert not has_low_bits([0b1000], 3)
        assert has_low_bits([0b1000], 4)
        assert not has_low_bits([0, 1], 32)
        assert has_low_bits([0, 1], 33)
        assert has_low_bits([5], 64)
        assert not has_low_bits([], 10)


class TestShiftEngine:
    """Tests for shift_left / shift_right."""

    def test_shift_left_whole_and_partial_limbs(self):
        """33 bits is one zero limb plus a one-bit rotation."""
        assert shift_left([1], 33) == [0, 2]

    def test_shift_left_carries_into_new_limb(self):
        """Overflow out of the top limb becomes a new limb."""
        assert shift_left([0x80000000], 1) == [0, 1]

    def test_shift_left_by_zero(self):
        """Shifting by zero changes nothing."""
        assert shift_left([3, 7], 0) == [3, 7]

    def test_shift_left_zero_value(self):
        """Shifting zero stays zero, no limbs are inserted."""
        assert shift_left([], 100) == []

    def test_shift_right_whole_and_partial_limbs(self):
        """Right shift undoes a left shift."""
        assert shift_right([0, 2], 33) == [1]

    def test_shift_right_moves_bits_down_a_limb(self):
        """Low bit of an upper limb lands at the top of the limb below."""
        assert shift_right([0, 1], 1) == [0x80000000]

    def test_shift_right_truncates(self):
        """Bits shifted below zero are discarded."""
        assert shift_right([1], 1) == []
        assert shift_right([7], 1) == [3]
        assert shift_right([5, 1], 64) == []

    @pytest.mark.parametrize("shift", [1, 31, 32, 33, 64, 95])
    def test_shifts_match_integer_shifts(self, shift):
        """Limb shifts agree with Python integer shifts."""
        value = 0x1234_5678_9ABC_DEF0_0FED_CBA9
        assert to_int(shift_left(from_unsigned(value), shift)) == value << shift
        assert to_int(shift_right(from_unsigned(value), shift)) == value >> shift

    def test_negative_shift_raises(self):
        """Negative shift amounts are rejected."""
        with pytest.raises(NegativeShiftError):
            shift_left([1], -1)
        with pytest.raises(NegativeShiftError):
            shift_right([1], -1)


class TestMagnitudeArithmetic:
    """Tests for magnitude add / subtract / multiply."""

    def test_add_carries(self):
        """Carry propagates into the guard limb."""
        assert add_magnitudes([LIMB_MASK], [1]) == [0, 1]
        assert add_magnitudes([LIMB_MASK, LIMB_MASK], [1]) == [0, 0, 1]

    def test_add_with_zero(self):
        """Adding the empty magnitude is the identity."""
        assert add_magnitudes([], [7]) == [7]
        assert add_magnitudes([7], []) == [7]

    def test_sub_borrows(self):
        """Borrow propagates across limbs."""
        assert sub_magnitudes([0, 1], [1]) == [LIMB_MASK]
        assert sub_magnitudes([0, 0, 1], [1]) == [LIMB_MASK, LIMB_MASK]

    def test_sub_equal_is_empty(self):
        """Equal magnitudes cancel to zero."""
        assert sub_magnitudes([5, 9], [5, 9]) == []

    def test_sub_underflow_raises(self):
        """Subtracting a larger magnitude is an error."""
        with pytest.raises(ValueError, match="underflow"):
            sub_magnitudes([1], [2])
        with pytest.raises(ValueError, match="underflow"):
            sub_magnitudes([1], [0, 1])

    def test_mul_double_width(self):
        """(2^32 - 1)^2 needs both halves of the double-width product."""
        assert mul_magnitudes([LIMB_MASK], [LIMB_MASK]) == [1, LIMB_MASK - 1]

    def test_mul_zero(self):
        """A zero operand gives zero."""
        assert mul_magnitudes([], [3]) == []
        assert mul_magnitudes([3], []) == []

    @pytest.mark.parametrize(
        "a,b",
        [
            (2**64 - 1, 2**64 - 1),
            (10**30 + 7, 3**50),
            (2**96, 2**31 + 1),
            (123456789, 1),
        ],
    )
    def test_arithmetic_matches_integers(self, a, b):
        """Limb arithmetic agrees with Python integers."""
        la, lb = from_unsigned(a), from_unsigned(b)
        assert to_int(add_magnitudes(la, lb)) == a + b
        assert to_int(mul_magnitudes(la, lb)) == a * b
        assert to_int(sub_magnitudes(la, lb)) == a - b
