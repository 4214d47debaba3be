"""
Kernel: byte/bit codec and XOR ops.

Components:
  - bits: as_bytes, to_bits/from_bits, pack/unpack, bit_mask/bit_at (MSB-first)
  - ops: xor_bytes, xor_sum, is_zero, only_odd_ones, validate_xor
"""

from .bits import (
    as_bytes,
    to_bits,
    from_bits,
    pack,
    unpack,
    bit_mask,
    bit_at
)
from .ops import (
    xor_bytes,
    xor_sum,
    is_zero,
    only_odd_ones,
    validate_xor
)

__all__ = [
    # Bits
    "as_bytes",
    "to_bits",
    "from_bits",
    "pack",
    "unpack",
    "bit_mask",
    "bit_at",

    # Ops
    "xor_bytes",
    "xor_sum",
    "is_zero",
    "only_odd_ones",
    "validate_xor",
]
