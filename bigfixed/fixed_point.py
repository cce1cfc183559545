"""Arbitrary-precision signed fixed-point numbers.

A FixedPoint is a magnitude stored as a list of 32-bit limbs, a signed binary
point position and a sign flag:

    value = (-1)^negative * magnitude * 2^-precision

`precision` counts fractional bits. It may be negative, in which case the
magnitude is scaled up instead of down.

All arithmetic is exact. The only places where bits are discarded are
division (the quotient is floored to the grid of its precision) and
narrowing with set_precision (truncation toward zero). Nothing goes through
binary floating point.
"""

from __future__ import annotations

import math
import sys

import structlog

from bigfixed.constants import LIMB_BITS, LIMB_MASK
from bigfixed.errors import DivisionByZero, InvalidFloatInput
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

__all__ = ["FixedPoint", "align", "divide"]

logger = structlog.get_logger()

# Bits in an IEEE-754 double significand, hidden bit included
FLOAT_MANTISSA_BITS = sys.float_info.mant_dig


class FixedPoint:
    """Signed fixed-point number of unbounded size.

    Instances are mutable: the compound operators (+=, *=, <<=, ...) and the
    explicit mutators (set_precision, flip_sign, set_bit, set_digit) change
    the receiver in place. Every other operation returns a new instance.
    No two instances ever share a limb list.

    Example: 3.25 at precision 2 is stored as magnitude [13], precision 2.
    """

    __slots__ = ("_limbs", "_precision", "_negative")
    __hash__ = None  # type: ignore[assignment]  # Mutable, and equal values may differ in precision

    def __init__(self, value: int | float | FixedPoint = 0, precision: int | None = None) -> None:
        """Create from an int, float or another FixedPoint.

        Args:
            value: Source value. Defaults to zero.
            precision: If given, the result is rescaled to this precision
                (narrowing truncates). Otherwise ints get precision 0, floats
                their exact binary exponent and FixedPoints keep theirs.

        Raises:
            TypeError: If value is not an int, float or FixedPoint
            InvalidFloatInput: If value is an infinite or NaN float
        """
        if isinstance(value, FixedPoint):
            source = value
        elif isinstance(value, int):
            source = FixedPoint.from_integer(value)
        elif isinstance(value, float):
            source = FixedPoint.from_float(value)
        else:
            raise TypeError(f"FixedPoint requires int, float or FixedPoint, got {type(value).__name__}")

        self._limbs = list(source._limbs)
        self._precision = source._precision
        self._negative = source._negative
        if precision is not None:
            self.set_precision(precision)

    @classmethod
    def _from_parts(cls, limbs: list[int], precision: int, negative: bool) -> FixedPoint:
        """Build directly from a limb list the caller gives up ownership of."""
        result = cls.__new__(cls)
        result._limbs = limbs
        result._precision = precision
        result._negative = negative
        result._normalize()
        return result

    @classmethod
    def zero(cls) -> FixedPoint:
        """Create a FixedPoint with value 0."""
        return cls._from_parts([], 0, False)

    @classmethod
    def from_integer(cls, value: int, precision: int = 0) -> FixedPoint:
        """Create from an integer, optionally rescaled to `precision` bits.

        Raises:
            TypeError: If value is not an int
        """
        if not isinstance(value, int):
            raise TypeError(f"from_integer requires int, got {type(value).__name__}")
        result = cls._from_parts(from_unsigned(abs(value)), 0, value < 0)
        return result.set_precision(precision)

    @classmethod
    def from_float(cls, value: float) -> FixedPoint:
        """Create from a float, losslessly.

        The significand becomes the magnitude (trailing zero bits stripped) and
        the binary exponent becomes the precision, so 0.375 is stored as
        magnitude 3 at precision 3 and 2.0**70 as magnitude 1 at precision -70.

        Raises:
            InvalidFloatInput: If value is infinite or NaN
        """
        if math.isinf(value) or math.isnan(value):
            logger.debug("invalid_float_input", value=repr(value))
            raise InvalidFloatInput(f"Cannot represent {value!r} as FixedPoint")

        # frexp gives |value| = fraction * 2^exponent with 0.5 <= fraction < 1,
        # and fraction has at most FLOAT_MANTISSA_BITS significant bits
        fraction, exponent = math.frexp(abs(value))
        mantissa = int(fraction * (1 << FLOAT_MANTISSA_BITS))
        precision = FLOAT_MANTISSA_BITS - exponent
        if mantissa:
            trailing = (mantissa & -mantissa).bit_length() - 1
            mantissa >>= trailing
            precision -= trailing
        else:
            precision = 0

        return cls._from_parts(from_unsigned(mantissa), precision, math.copysign(1.0, value) < 0)

    def copy(self) -> FixedPoint:
        """Return an independent copy."""
        return FixedPoint._from_parts(list(self._limbs), self._precision, self._negative)

    __copy__ = copy

    def _assign(self, other: FixedPoint) -> None:
        """Take over the state of a temporary result."""
        self._limbs = other._limbs
        self._precision = other._precision
        self._negative = other._negative

    def _normalize(self) -> None:
        normalize(self._limbs)
        if not self._limbs:
            self._negative = False

    # --- Accessors ---

    @property
    def precision(self) -> int:
        """Number of fractional bits (may be negative)."""
        return self._precision

    @property
    def magnitude(self) -> list[int]:
        """Copy of the limb list, least significant limb first."""
        return list(self._limbs)

    def sign(self) -> int:
        """Return -1, 0 or 1."""
        if not self._limbs:
            return 0
        return -1 if self._negative else 1

    def is_zero(self) -> bool:
        return not self._limbs

    def bits_in_magnitude(self) -> int:
        """Bit length of the magnitude, ignoring the binary point."""
        return bit_length(self._limbs)

    # --- Mutators ---

    def set_precision(self, precision: int) -> FixedPoint:
        """Rescale to `precision` fractional bits in place and return self.

        Widening is exact. Narrowing drops the fractional bits that no longer
        fit, which truncates the magnitude toward zero; there is no rounding.
        """
        old_precision = self._precision
        if precision > old_precision:
            shift_left(self._limbs, precision - old_precision)
        elif precision < old_precision:
            dropped = old_precision - precision
            if has_low_bits(self._limbs, dropped):
                logger.debug(
                    "precision_truncated",
                    old_precision=old_precision,
                    new_precision=precision,
                )
            shift_right(self._limbs, dropped)

        self._precision = precision
        self._normalize()
        return self

    def flip_sign(self) -> FixedPoint:
        """Negate in place and return self. Zero stays non-negative."""
        if self._limbs:
            self._negative = not self._negative
        return self

    # =========================================================================
    # Bit/limb accessor
    #
    # Indices are relative to the binary point: bit 0 has weight 2^0, bit -1
    # weight 2^-1, and logical limb i covers bits [32i, 32i + 32). Storage is
    # treated as zero-padded on both sides.
    # =========================================================================

    def _locate(self, index: int) -> tuple[int, int]:
        """Translate a binary-point-relative bit index to (limb, bit) in storage.

        A negative limb index lies below the lowest stored bit.
        """
        return divmod(index + self._precision, LIMB_BITS)

    def _limb_at(self, index: int) -> int:
        if 0 <= index < len(self._limbs):
            return self._limbs[index]
        return 0

    def _store_bits(self, index: int, offset: int, width: int, value: int) -> None:
        """Overwrite `width` bits of storage limb `index` starting at `offset`."""
        if index < 0:
            return
        if index >= len(self._limbs):
            if not value:
                return
            self._limbs.extend([0] * (index + 1 - len(self._limbs)))
        mask = ((1 << width) - 1) << offset
        self._limbs[index] = (self._limbs[index] & ~mask & LIMB_MASK) | (value << offset)

    def get_bit(self, index: int) -> int:
        """Return the bit with weight 2^index (0 outside the stored range)."""
        limb, bit = self._locate(index)
        return (self._limb_at(limb) >> bit) & 1

    def set_bit(self, index: int, value: int | bool) -> FixedPoint:
        """Set the bit with weight 2^index and return self.

        Bits below the lowest stored bit cannot be represented at the current
        precision, so writing there does nothing. Writing above the top grows
        the magnitude.
        """
        limb, bit = self._locate(index)
        self._store_bits(limb, bit, 1, 1 if value else 0)
        self._normalize()
        return self

    def get_digit(self, index: int) -> int:
        """Return logical limb `index`, i.e. bits [32*index, 32*index + 32).

        When the precision is not a multiple of the limb width, the logical
        limb straddles two storage limbs and is assembled from both.
        """
        limb, bit = self._locate(index * LIMB_BITS)
        if bit == 0:
            return self._limb_at(limb)
        low = self._limb_at(limb) >> bit
        high = (self._limb_at(limb + 1) << (LIMB_BITS - bit)) & LIMB_MASK
        return low | high

    def set_digit(self, index: int, value: int) -> FixedPoint:
        """Overwrite logical limb `index` and return self.

        Parts of the limb below the lowest stored bit are dropped.

        Raises:
            ValueError: If value does not fit in one limb
        """
        if not 0 <= value <= LIMB_MASK:
            raise ValueError(f"Limb value out of range: {value}")

        limb, bit = self._locate(index * LIMB_BITS)
        if bit == 0:
            self._store_bits(limb, 0, LIMB_BITS, value)
        else:
            low_width = LIMB_BITS - bit
            self._store_bits(limb, bit, low_width, value & ((1 << low_width) - 1))
            self._store_bits(limb + 1, 0, bit, value >> low_width)
        self._normalize()
        return self

    # =========================================================================
    # Shift engine (value scaling, precision unchanged)
    # =========================================================================

    def __ilshift__(self, shift: int) -> FixedPoint:
        if not isinstance(shift, int):
            return NotImplemented
        shift_left(self._limbs, shift)
        self._normalize()
        return self

    def __irshift__(self, shift: int) -> FixedPoint:
        if not isinstance(shift, int):
            return NotImplemented
        shift_right(self._limbs, shift)
        self._normalize()
        return self

    def __lshift__(self, shift: int) -> FixedPoint:
        if not isinstance(shift, int):
            return NotImplemented
        result = self.copy()
        result <<= shift
        return result

    def __rshift__(self, shift: int) -> FixedPoint:
        if not isinstance(shift, int):
            return NotImplemented
        result = self.copy()
        result >>= shift
        return result

    # =========================================================================
    # Comparator
    # =========================================================================

    def abs_compare(self, other: FixedPoint) -> int:
        """Compare magnitudes: -1, 0 or 1 as |self| is less, equal or greater.

        The binary position just above the most significant set bit decides
        first. Ties are broken limb by limb from there down to the lowest bit
        either operand stores.
        """
        if not self._limbs or not other._limbs:
            return bool(self._limbs) - bool(other._limbs)

        self_top = self.bits_in_magnitude() - self._precision
        other_top = other.bits_in_magnitude() - other._precision
        if self_top != other_top:
            return 1 if self_top > other_top else -1

        highest = (self_top - 1) // LIMB_BITS
        lowest = min(-self._precision, -other._precision) // LIMB_BITS
        for index in range(highest, lowest - 1, -1):
            x = self.get_digit(index)
            y = other.get_digit(index)
            if x != y:
                return 1 if x > y else -1

        return 0

    def compare(self, other: FixedPoint) -> int:
        """Signed comparison: -1, 0 or 1."""
        self_sign = self.sign()
        other_sign = other.sign()
        if self_sign != other_sign:
            return 1 if self_sign > other_sign else -1

        order = self.abs_compare(other)
        return order if self_sign >= 0 else -order

    def __eq__(self, other: object) -> bool:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return self.compare(other_fp) == 0

    def __ne__(self, other: object) -> bool:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return self.compare(other_fp) != 0

    def __lt__(self, other: object) -> bool:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return self.compare(other_fp) < 0

    def __le__(self, other: object) -> bool:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return self.compare(other_fp) <= 0

    def __gt__(self, other: object) -> bool:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return self.compare(other_fp) > 0

    def __ge__(self, other: object) -> bool:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return self.compare(other_fp) >= 0

    def __bool__(self) -> bool:
        """True if non-zero."""
        return bool(self._limbs)

    # =========================================================================
    # Arithmetic engine
    # =========================================================================

    def _add(self, other: FixedPoint, negate: bool = False) -> None:
        """Add `other` (or -other) into self. Result precision is the max of both."""
        addend = other.copy()
        if negate:
            addend.flip_sign()
        align(self, addend)

        if self._negative == addend._negative:
            self._limbs = add_magnitudes(self._limbs, addend._limbs)
        else:
            order = self.abs_compare(addend)
            if order == 0:
                self._limbs = []
            elif order > 0:
                self._limbs = sub_magnitudes(self._limbs, addend._limbs)
            else:
                self._limbs = sub_magnitudes(addend._limbs, self._limbs)
                self._negative = addend._negative

        self._normalize()

    def _mul(self, other: FixedPoint) -> None:
        """Multiply self by `other`. Precisions add."""
        limbs = mul_magnitudes(self._limbs, other._limbs)
        negative = self._negative != other._negative
        precision = self._precision + other._precision
        self._limbs = limbs
        self._negative = negative
        self._precision = precision
        self._normalize()

    def div_mod(self, other: FixedPoint | int | float) -> tuple[FixedPoint, FixedPoint]:
        """Return (quotient, remainder), see `divide`.

        Raises:
            DivisionByZero: If other is zero
            TypeError: If other is not a number
        """
        other_fp = _coerce(other)
        if other_fp is None:
            raise TypeError(f"Cannot divide FixedPoint by {type(other).__name__}")
        return divide(self, other_fp)

    def __iadd__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        self._add(other_fp)
        return self

    def __isub__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        self._add(other_fp, negate=True)
        return self

    def __imul__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        self._mul(other_fp)
        return self

    def __itruediv__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        quotient, _ = divide(self, other_fp)
        self._assign(quotient)
        return self

    def __imod__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        _, remainder = divide(self, other_fp)
        self._assign(remainder)
        return self

    def __add__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        result = self.copy()
        result._add(other_fp)
        return result

    def __radd__(self, other: int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        other_fp._add(self)
        return other_fp

    def __sub__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        result = self.copy()
        result._add(other_fp, negate=True)
        return result

    def __rsub__(self, other: int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        other_fp._add(self, negate=True)
        return other_fp

    def __mul__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        result = self.copy()
        result._mul(other_fp)
        return result

    def __rmul__(self, other: int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        other_fp._mul(self)
        return other_fp

    def __truediv__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return divide(self, other_fp)[0]

    def __rtruediv__(self, other: int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return divide(other_fp, self)[0]

    def __mod__(self, other: FixedPoint | int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return divide(self, other_fp)[1]

    def __rmod__(self, other: int | float) -> FixedPoint:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return divide(other_fp, self)[1]

    def __divmod__(self, other: FixedPoint | int | float) -> tuple[FixedPoint, FixedPoint]:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return divide(self, other_fp)

    def __rdivmod__(self, other: int | float) -> tuple[FixedPoint, FixedPoint]:
        other_fp = _coerce(other)
        if other_fp is None:
            return NotImplemented
        return divide(other_fp, self)

    def __neg__(self) -> FixedPoint:
        return self.copy().flip_sign()

    def __pos__(self) -> FixedPoint:
        return self.copy()

    def __abs__(self) -> FixedPoint:
        return FixedPoint._from_parts(list(self._limbs), self._precision, False)

    # =========================================================================
    # Decimal formatter
    # =========================================================================

    def to_decimal_string(self, fractional_digits: int) -> str:
        """Render with exactly `fractional_digits` decimal places.

        Digits past the last one shown are truncated, not rounded. The decimal
        point is omitted when fractional_digits is 0.

        Raises:
            ValueError: If fractional_digits is negative
        """
        if fractional_digits < 0:
            raise ValueError(f"fractional_digits must be non-negative, got {fractional_digits}")

        num = abs(self)
        num *= FixedPoint.from_integer(10**fractional_digits)
        num.set_precision(0)

        ten = FixedPoint.from_integer(10)
        # Built least significant first, reversed at the end
        chars: list[str] = []
        while num:
            num, digit = divide(num, ten)
            chars.append(chr(ord("0") + digit.get_digit(0)))
            if len(chars) == fractional_digits:
                chars.append(".")

        while len(chars) < fractional_digits:
            chars.append("0")
            if len(chars) == fractional_digits:
                chars.append(".")

        if not chars or chars[-1] == ".":
            chars.append("0")

        if self._negative:
            chars.append("-")

        return "".join(reversed(chars))

    def __str__(self) -> str:
        # A value with p fractional bits has exactly p fractional decimal digits
        return self.to_decimal_string(max(self._precision, 0))

    def __repr__(self) -> str:
        return f"FixedPoint({self}, precision={self._precision})"


# =============================================================================
# Module-level operations
# =============================================================================


def _coerce(value: object) -> FixedPoint | None:
    """Return value as a FixedPoint, or None for unsupported types."""
    if isinstance(value, FixedPoint):
        return value
    if isinstance(value, int):
        return FixedPoint.from_integer(value)
    if isinstance(value, float):
        return FixedPoint.from_float(value)
    return None


def align(a: FixedPoint, b: FixedPoint) -> None:
    """Raise the lower-precision operand in place to the other's precision.

    Widening is exact, so neither value changes.
    """
    if a.precision < b.precision:
        a.set_precision(b.precision)
    elif b.precision < a.precision:
        b.set_precision(a.precision)


def divide(dividend: FixedPoint, divisor: FixedPoint) -> tuple[FixedPoint, FixedPoint]:
    """Floor division on the grid of max(dividend.precision, divisor.precision).

    The quotient magnitude is found by binary restoring division: candidate
    bits are tried from the highest one that can possibly be set down to the
    lowest bit of the quotient precision, and a bit is kept only if
    |quotient| * |divisor| still does not exceed |dividend|. The running
    product is kept next to the quotient, so each candidate costs one
    addition and one comparison.

    The remainder is dividend - quotient * divisor. If it is non-zero with the
    opposite sign of the divisor, the quotient is lowered by one unit in its
    last place, so the remainder always has the divisor's sign.

    Args:
        dividend: Number to divide
        divisor: Number to divide by

    Returns:
        Tuple of (quotient, remainder). The quotient has precision
        max(dividend.precision, divisor.precision).

    Raises:
        DivisionByZero: If divisor is zero

    Examples:
        -10 / 3 gives (-4, 2)
        10 / -3 gives (-4, -2)
        10 / 4 at precision 1 gives (2.5, 0)
    """
    if divisor.is_zero():
        logger.debug("division_by_zero", dividend=repr(dividend))
        raise DivisionByZero(f"Division by zero: {dividend!r} / 0")

    precision = max(dividend.precision, divisor.precision)
    quotient = FixedPoint._from_parts([], precision, False)

    if not dividend.is_zero():
        target = abs(dividend)
        # |dividend| < 2^dividend_top and |divisor| >= 2^(divisor_top - 1)
        dividend_top = dividend.bits_in_magnitude() - dividend.precision
        divisor_top = divisor.bits_in_magnitude() - divisor.precision
        top = dividend_top - divisor_top + precision

        if top >= 0:
            # step is |divisor| * 2^(bit - precision) for the candidate storage bit
            step = FixedPoint._from_parts(divisor.magnitude, divisor.precision + precision, False)
            step <<= top
            product = FixedPoint._from_parts([], step.precision, False)
            for bit in range(top, -1, -1):
                candidate = product + step
                if candidate.abs_compare(target) <= 0:
                    product = candidate
                    quotient.set_bit(bit - precision, 1)
                step >>= 1

        quotient._negative = dividend.sign() != divisor.sign()
        quotient._normalize()

    remainder = dividend - quotient * divisor
    if remainder.sign() not in (0, divisor.sign()):
        quotient -= FixedPoint._from_parts([1], precision, False)
        remainder = dividend - quotient * divisor
        logger.debug(
            "division_floor_adjusted",
            precision=precision,
            remainder_sign=remainder.sign(),
        )

    return quotient, remainder
