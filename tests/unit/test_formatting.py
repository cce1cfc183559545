"""Tests for decimal rendering."""

import pytest

from bigfixed import FixedPoint


class TestToDecimalString:
    """Tests for FixedPoint.to_decimal_string."""

    def test_zero(self):
        """Zero renders with the requested number of places."""
        assert FixedPoint().to_decimal_string(0) == "0"
        assert FixedPoint().to_decimal_string(5) == "0.00000"

    def test_integers(self):
        """Integers get zero fractional digits."""
        assert FixedPoint(-5).to_decimal_string(0) == "-5"
        assert FixedPoint(-5).to_decimal_string(3) == "-5.000"
        assert FixedPoint(10**50 + 7).to_decimal_string(2) == str(10**50 + 7) + ".00"

    def test_fraction_padding(self):
        """Short fractions are padded with zeros."""
        num = FixedPoint.from_float(0.0625)
        assert num.to_decimal_string(4) == "0.0625"
        assert num.to_decimal_string(6) == "0.062500"

    def test_truncates(self):
        """Extra digits are cut off, never rounded."""
        assert FixedPoint.from_float(0.0625).to_decimal_string(2) == "0.06"
        assert FixedPoint.from_float(2.75).to_decimal_string(1) == "2.7"
        assert FixedPoint.from_float(-2.75).to_decimal_string(1) == "-2.7"

    def test_leading_zero(self):
        """At least one digit before the point."""
        assert FixedPoint.from_float(0.5).to_decimal_string(1) == "0.5"

    def test_negative_rounding_to_zero_keeps_sign(self):
        """The sign comes from the value, not from the rendered digits."""
        assert FixedPoint.from_float(-0.0625).to_decimal_string(1) == "-0.0"

    def test_negative_precision_value(self):
        """Values with negative precision render as integers."""
        num = FixedPoint.from_float(2.0**64)
        assert num.to_decimal_string(1) == "18446744073709551616.0"

    def test_does_not_modify_value(self):
        """Rendering works on a copy."""
        num = FixedPoint.from_float(-2.75)
        num.to_decimal_string(10)
        assert num == -2.75
        assert num.precision == 2

    def test_negative_digits_raises(self):
        """The number of places cannot be negative."""
        with pytest.raises(ValueError, match="non-negative"):
            FixedPoint(1).to_decimal_string(-1)


class TestStr:
    """Tests for str() and repr()."""

    def test_str_uses_precision(self):
        """str() shows every fractional bit exactly."""
        assert str(FixedPoint.from_float(2.5)) == "2.5"
        assert str(FixedPoint(5, 3)) == "5.000"
        assert str(FixedPoint(12, -2)) == "12"

    def test_str_is_exact_for_floats(self):
        """The decimal expansion of a binary fraction terminates."""
        assert str(FixedPoint.from_float(0.1)) == "0.1000000000000000055511151231257827021181583404541015625"

    def test_repr(self):
        """repr shows value and precision."""
        assert repr(FixedPoint.from_float(-2.5)) == "FixedPoint(-2.5, precision=1)"
        assert repr(FixedPoint()) == "FixedPoint(0, precision=0)"
