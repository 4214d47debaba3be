"""
Core Component: BLAKE3 Fingerprints

Deterministic digests used by receipts. Value lists are committed to by
hashing their HSL1 frame (bytesio.serialize_hash_list), so receipts never
copy a pool into the payload.

No seeding, no randomness, no timestamps.
"""

import blake3


def blake3_hash(data: bytes) -> str:
    """
    Return lowercase hex BLAKE3-256 digest of a byte stream.

    Example:
        >>> blake3_hash(b"test")
        '4878ca0425c739fa427f7eda20fe845f6b2e46ba5fe2a14df5b1e32f50603215'
    """
    hasher = blake3.blake3()
    hasher.update(data)
    return hasher.hexdigest()

