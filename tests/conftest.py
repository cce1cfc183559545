"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
import structlog

from bigfixed import FixedPoint


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any structlog.configure() done by a test (the CLI configures it)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def ten() -> FixedPoint:
    """The integer 10 at precision 0."""
    return FixedPoint.from_integer(10)


@pytest.fixture
def three() -> FixedPoint:
    """The integer 3 at precision 0."""
    return FixedPoint.from_integer(3)


@pytest.fixture
def mixed_values() -> list[FixedPoint]:
    """Positive, negative and zero values at assorted precisions."""
    return [
        FixedPoint.from_integer(0),
        FixedPoint.from_integer(0, 17),
        FixedPoint.from_integer(7),
        FixedPoint.from_integer(-7, 3),
        FixedPoint.from_float(2.75),
        FixedPoint.from_float(-0.1),
        FixedPoint.from_integer(2**70 + 5, 33),
        FixedPoint.from_integer(-(2**40), -8),
        FixedPoint.from_float(2.0**-90),
    ]
