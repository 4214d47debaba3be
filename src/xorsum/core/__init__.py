"""
Core foundation: registry, hashing, receipts, hex I/O, error taxonomy.
"""

from .registry import param_registry, RegistryError
from .hashing import blake3_hash
from .bytesio import (
    to_hex,
    from_hex,
    is_hex_data,
    read_hash_list,
    serialize_hash_list,
    random_pool,
    SerializationError,
    HashListError
)
from .receipts import (
    Receipts,
    assert_double_run_equal,
    ReceiptError,
    DeterminismError
)
from .errors import (
    XorSumError,
    EmptyTarget,
    LengthMismatch,
    InsufficientCandidates,
    Unsolvable,
    InvariantViolation,
    Cancelled,
    raise_if_cancelled
)

__all__ = [
    # Registry
    "param_registry",
    "RegistryError",

    # Hashing
    "blake3_hash",

    # Hex / hash-list I/O
    "to_hex",
    "from_hex",
    "is_hex_data",
    "read_hash_list",
    "serialize_hash_list",
    "random_pool",
    "SerializationError",
    "HashListError",

    # Receipts
    "Receipts",
    "assert_double_run_equal",
    "ReceiptError",
    "DeterminismError",

    # Errors
    "XorSumError",
    "EmptyTarget",
    "LengthMismatch",
    "InsufficientCandidates",
    "Unsolvable",
    "InvariantViolation",
    "Cancelled",
    "raise_if_cancelled",
]
