"""
Kernel Component: XOR Ops

Pure operations on byte values: pairwise XOR, XOR sum, zero test,
odd-multiplicity filtering and XOR-sum validation.
"""

from collections import Counter
from typing import Iterable

from ..core.errors import InvariantViolation
from .bits import pack, unpack


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """
    Return a XOR b.

    Raises:
        ValueError: If lengths differ.
    """
    if len(a) != len(b):
        raise ValueError(f"XOR length mismatch: {len(a)} != {len(b)}")
    return unpack(pack(a) ^ pack(b), len(a))


def xor_sum(values: Iterable[bytes], n_bytes: int) -> bytes:
    """
    XOR all values together, starting from n_bytes of zeros.

    An empty iterable sums to all-zero.

    Raises:
        ValueError: If any value is not n_bytes long.
    """
    acc = 0
    for i, v in enumerate(values):
        if len(v) != n_bytes:
            raise ValueError(f"Value {i} has length {len(v)}, expected {n_bytes}")
        acc ^= pack(v)
    return unpack(acc, n_bytes)


def is_zero(data: bytes) -> bool:
    """True if every byte is zero (an empty value counts as zero)."""
    return not any(data)


def only_odd_ones(values: Iterable[bytes]) -> list[bytes]:
    """
    Keep values that occur an odd number of times.

    Pairs cancel under XOR, so the XOR sum is unchanged. Output order is
    the order of first appearance, and each kept value appears once.
    """
    counts = Counter(values)
    return [v for v, count in counts.items() if count % 2 == 1]


def validate_xor(target: bytes, values: Iterable[bytes], stage: str = "validate") -> None:
    """
    Ensure that the XOR sum of values equals target.

    Raises:
        InvariantViolation: If the sum differs or a value has the wrong length.
    """
    try:
        total = xor_sum(values, len(target))
    except ValueError as e:
        raise InvariantViolation(str(e), stage=stage) from e
    if total != target:
        raise InvariantViolation(
            f"Value list XOR sums to {total.hex().upper()}, expected {target.hex().upper()}",
            stage=stage
        )
