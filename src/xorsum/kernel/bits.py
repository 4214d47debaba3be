"""
Kernel Component: Byte/Bit Codec

Fixed-length byte values ↔ per-bit sequences and packed words.

Bit numbering (frozen, registry "bit_order" = "msb-first"):
  - Bit position 0 is bit 7 of byte 0, position 7 is bit 0 of byte 0,
    position 8 is bit 7 of byte 1, and so on.
  - A packed word is int.from_bytes(data, 'big'), so position i of an
    n-byte value is bit (8n - 1 - i) of the word.

Packed words are what the solver XORs; bool sequences exist for callers
that want to inspect individual bits.
"""


def to_bits(data: bytes) -> list[bool]:
    """
    Expand a byte value into 8 booleans per byte, most significant bit first.

    Example:
        >>> to_bits(b"\\xa0")
        [True, False, True, False, False, False, False, False]
    """
    bits = []
    for byte in data:
        for shift in range(7, -1, -1):
            bits.append(bool((byte >> shift) & 1))
    return bits


def from_bits(bits: list[bool]) -> bytes:
    """
    Pack booleans into bytes, 8 per byte, most significant bit first.

    If len(bits) is not a multiple of 8, the final partial group is packed
    into the low bits of the last byte (left-padded with zeros).
    """
    out = bytearray()
    for start in range(0, len(bits), 8):
        byte = 0
        for b in bits[start:start + 8]:
            byte = (byte << 1) | (1 if b else 0)
        out.append(byte)
    return bytes(out)


def pack(data: bytes) -> int:
    """Return the big-endian integer word for a byte value."""
    return int.from_bytes(data, byteorder='big')


def unpack(word: int, n_bytes: int) -> bytes:
    """
    Return the n_bytes big-endian encoding of a word.

    Raises:
        ValueError: If word is negative or does not fit in n_bytes.
    """
    if word < 0 or word >> (8 * n_bytes):
        raise ValueError(f"Word does not fit in {n_bytes} bytes: {word:#x}")
    return word.to_bytes(n_bytes, byteorder='big')


def bit_mask(position: int, n_bits: int) -> int:
    """
    Return the single-bit word selecting bit position `position`.

    Raises:
        ValueError: If position is outside [0, n_bits).
    """
    if not 0 <= position < n_bits:
        raise ValueError(f"Bit position {position} outside [0, {n_bits})")
    return 1 << (n_bits - 1 - position)


def bit_at(word: int, position: int, n_bits: int) -> int:
    """Return bit `position` (0 = most significant) of an n_bits-wide word."""
    return (word >> (n_bits - 1 - position)) & 1


def as_bytes(value, name: str = "value") -> bytes:
    """
    Return value as immutable bytes.

    Only bytes-like objects are accepted; an int would otherwise turn into
    a zero-filled buffer of that length.

    Raises:
        TypeError: If value is not bytes, bytearray or memoryview.
    """
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")
    return bytes(value)
