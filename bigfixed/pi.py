"""Compute pi to a given number of decimal places.

Uses the Bailey-Borwein-Plouffe series

    pi = sum_i 1/16^i * (4/(8i+1) - 2/(8i+4) - 1/(8i+5) - 1/(8i+6))

with nothing but FixedPoint +, -, *, / and decimal rendering.

Usage:
    bigfixed-pi            # 100 digits (or $BIGFIXED_PI_DIGITS)
    bigfixed-pi 500 -v     # 500 digits with debug logging
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import structlog
from pydantic import ValidationError

from bigfixed.config import PiConfig
from bigfixed.fixed_point import FixedPoint

logger = structlog.get_logger()


def compute_pi(config: PiConfig) -> FixedPoint:
    """Sum the series at config.binary_precision fractional bits.

    Each term shrinks by a factor of 16, so digits + 1 terms are more than
    enough for `digits` decimal places.
    """
    precision = config.binary_precision

    pi = FixedPoint.from_integer(0, precision)
    one = FixedPoint.from_integer(1)
    two = FixedPoint.from_integer(2)
    four = FixedPoint.from_integer(4)
    eight = FixedPoint.from_integer(8)

    # Denominators 8i+1, 8i+4, 8i+5, 8i+6 at working precision, so the
    # quotients below carry it too
    a = FixedPoint.from_integer(1, precision)
    b = FixedPoint.from_integer(4, precision)
    c = FixedPoint.from_integer(5, precision)
    d = FixedPoint.from_integer(6, precision)
    pow16 = FixedPoint.from_integer(1)

    for _ in range(config.digits + 1):
        pi += (four / a - two / b - one / c - one / d) / pow16

        pow16 *= 16
        a += eight
        b += eight
        c += eight
        d += eight

    return pi


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the pi example."""
    parser = argparse.ArgumentParser(
        description="Computes pi with n decimal digits of precision",
    )
    parser.add_argument(
        "digits",
        type=int,
        nargs="?",
        default=None,
        help="Number of decimal digits (default: $BIGFIXED_PI_DIGITS or 100)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    overrides = {} if args.digits is None else {"digits": args.digits}
    try:
        config = PiConfig.from_env(**overrides)
    except ValidationError as e:
        logger.error("invalid_config", error=str(e))
        print("Error: Precision must be a non-negative integer", file=sys.stderr)
        return 1

    start = time.perf_counter()
    pi = compute_pi(config)
    elapsed = time.perf_counter() - start

    logger.info(
        "pi_computed",
        digits=config.digits,
        binary_precision=config.binary_precision,
        elapsed_ms=round(elapsed * 1000, 1),
    )

    print(f"First {config.digits} decimal floating point places of pi are:")
    print()
    print(pi.to_decimal_string(config.digits))
    print()
    print(f"Computed in {elapsed * 1000:.0f}ms")

    return 0


if __name__ == "__main__":
    sys.exit(main())
