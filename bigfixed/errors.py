"""FixedPoint error classes."""


class FixedPointError(ArithmeticError):
    """Base error for FixedPoint operations."""

    pass


class DivisionByZero(FixedPointError, ZeroDivisionError):
    """Division or modulo by a zero-valued operand."""

    pass


class InvalidFloatInput(FixedPointError, ValueError):
    """Construction from an infinite or NaN float."""

    pass


class NegativeShiftError(FixedPointError, ValueError):
    """Shift amount is negative."""

    pass
