"""Limb layout constants.

Magnitudes are stored base 2^32, least significant limb first.
"""

# Width of one limb in bits
LIMB_BITS = 32

# 2^32: one past the largest limb value
LIMB_BASE = 1 << LIMB_BITS

# All-ones limb, used to truncate double-width intermediates
LIMB_MASK = LIMB_BASE - 1
