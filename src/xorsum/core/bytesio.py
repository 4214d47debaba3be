"""
Core Component: Hex Text & Hash-List I/O

Conversion between byte values and their hex text form, reading hash lists
from text files, framed serialization of value lists, and random demo data.

Hex text is always upper-case on output and case-insensitive on input.
"""

import os
import random
from pathlib import Path
from typing import Iterable, Optional

from .registry import param_registry


def to_hex(data: bytes) -> str:
    """Return upper-case hex text for a byte value (two digits per byte)."""
    return bytes(data).hex().upper()


def is_hex_data(text: Optional[str]) -> bool:
    """
    True if text is a non-empty, even-length run of ASCII hex digits.

    Surrounding whitespace is not accepted; callers strip first.
    """
    if not text or text.isspace():
        return False
    if len(text) % 2 != 0:
        return False
    return all(ch in "0123456789abcdefABCDEF" for ch in text)


def from_hex(text: str) -> bytes:
    """
    Parse hex text into bytes.

    Raises:
        ValueError: If text is not valid hex data (see is_hex_data).
    """
    if not is_hex_data(text):
        raise ValueError(f"Invalid hash: '{text}'")
    return bytes.fromhex(text)


def read_hash_list(path: str | Path) -> list[bytes]:
    """
    Read one hex hash per line from a text file.

    Rules:
      - Leading/trailing whitespace is stripped.
      - Blank lines are skipped.
      - Lines starting with a comment prefix (';' or '#') are skipped.
      - Every other line must be valid hex data.
      - Files larger than the registry limit are refused before reading.

    Args:
        path: File to read.

    Returns:
        list[bytes]: Values in file order.

    Raises:
        HashListError: On oversize file or invalid line (carries line number).
        OSError: If the file cannot be opened.
    """
    registry = param_registry()
    limit = registry["hash_list_max_bytes"]
    prefixes = tuple(registry["hash_list_comment_prefixes"])

    path = Path(path)
    size = path.stat().st_size
    if size > limit:
        raise HashListError(f"File '{path}' is larger than {limit} bytes", path=str(path))

    values = []
    with open(path, 'r', encoding='utf-8') as f:
        for line_no, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith(prefixes):
                continue
            if not is_hex_data(line):
                raise HashListError(f"Invalid hash: '{line}'", path=str(path), line_no=line_no)
            values.append(bytes.fromhex(line))

    return values


def serialize_hash_list(values: Iterable[bytes]) -> bytes:
    """
    Encode a list of equal-length values as a deterministic byte stream.

    Format (exact):
      - 4 ASCII bytes tag: b"HSL1"
      - 4 bytes count (uint32, big-endian)
      - 2 bytes value length n (uint16, big-endian; 0 for an empty list)
      - Payload: values concatenated in order, n bytes each

    Raises:
        SerializationError: If values differ in length or exceed the limits.
    """
    values = [bytes(v) for v in values]
    n = len(values[0]) if values else 0

    for i, v in enumerate(values):
        if len(v) != n:
            raise SerializationError(f"Value {i} has length {len(v)}, expected {n}")
    if n > 65535:
        raise SerializationError(f"Value length too large: {n}")
    if len(values) > 0xFFFFFFFF:
        raise SerializationError(f"Too many values: {len(values)}")

    tag = param_registry()["byte_frame_tags"]["HASH_LIST"]

    stream = bytearray()
    stream.extend(tag.encode('ascii'))
    stream.extend(len(values).to_bytes(4, byteorder='big'))
    stream.extend(n.to_bytes(2, byteorder='big'))
    for v in values:
        stream.extend(v)

    return bytes(stream)


def random_pool(
    n_bytes: int,
    factor: Optional[int] = None,
    seed: Optional[int] = None
) -> tuple[bytes, list[bytes]]:
    """
    Generate a random target and candidate pool for demos.

    Args:
        n_bytes: Length of every value.
        factor: Pool size as a multiple of the bit length
            (default: registry random_pool_factor).
        seed: Seed for a reproducible pool; None draws from os.urandom.

    Returns:
        (target, pool)
    """
    if n_bytes <= 0:
        raise ValueError(f"n_bytes must be positive, got {n_bytes}")
    if factor is None:
        factor = param_registry()["random_pool_factor"]

    if seed is None:
        draw = os.urandom
    else:
        draw = random.Random(seed).randbytes

    target = draw(n_bytes)
    pool = [draw(n_bytes) for _ in range(n_bytes * 8 * factor)]
    return target, pool


class SerializationError(Exception):
    """Raised when a value list cannot be framed."""
    pass


class HashListError(Exception):
    """Raised when a hash-list file is oversize or holds an invalid line."""

    def __init__(self, message: str, path: str, line_no: Optional[int] = None):
        self.path = path
        self.line_no = line_no
        if line_no is not None:
            message = f"{path}:{line_no}: {message}"
        super().__init__(message)
