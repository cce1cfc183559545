"""Configuration for the pi example.

Defaults can be overridden through the BIGFIXED_PI_DIGITS environment
variable, and command-line arguments override both.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from bigfixed.constants import LIMB_BITS

# Environment variable holding the default number of decimal digits
PI_DIGITS_ENV = "BIGFIXED_PI_DIGITS"


class PiConfig(BaseModel):
    """Settings for computing pi.

    Attributes:
        digits: Number of decimal digits after the point (default: 100)
        guard_bits: Extra fractional bits absorbing truncation error in the
            series terms (default: 32)
        limb_align: Working precision is rounded up to a multiple of this,
            so shifts move whole limbs (default: one limb)
    """

    model_config = {"frozen": True}

    digits: int = Field(default=100, ge=0)
    guard_bits: int = Field(default=32, ge=0)
    limb_align: int = Field(default=LIMB_BITS, gt=0)

    @property
    def binary_precision(self) -> int:
        """Fractional bits used for the computation.

        2^10 ~ 10^3, so each decimal digit needs about 10/3 bits.
        """
        bits = (10 * self.digits + 2) // 3
        aligned = -(-bits // self.limb_align) * self.limb_align
        return aligned + self.guard_bits

    @classmethod
    def from_env(cls, **overrides: int) -> PiConfig:
        """Build from the environment, with explicit overrides on top.

        Raises:
            pydantic.ValidationError: If a value is not a valid setting
        """
        values: dict[str, object] = {}
        env_digits = os.environ.get(PI_DIGITS_ENV)
        if env_digits is not None:
            values["digits"] = env_digits
        values.update(overrides)
        return cls.model_validate(values)
