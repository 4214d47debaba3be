"""
Core Component: Section Receipts & Double-Run Checker

Ordered receipts for every pass (solve, provenance, reduce, render).
Each receipt binds the parameter registry hash and commits to its payload
with a BLAKE3 section_hash, so two runs over the same input can be compared
by a single string.

No timestamps, no memory addresses, no environment leakage.
"""

import json
from typing import Any, Callable, Iterable

from .registry import param_registry
from .hashing import blake3_hash
from .bytesio import serialize_hash_list


class Receipts:
    """
    Section-scoped receipt builder.

    A pass creates a Receipts instance, logs key/value pairs, and produces a
    digest with:
      - section identifier
      - format_version
      - param_registry_hash
      - payload (ordered key/value pairs)
      - section_hash (commitment to all of the above)

    Payload values are limited to int, bool, str, None, bytes and
    list/tuple/dict of those. Bytes are stored as upper-case hex.
    Floats are rejected: timings never belong in a receipt.
    """

    def __init__(self, section: str):
        self.section = section
        self.payload = []  # list of (key, value) to preserve insertion order

    def put(self, key: str, value: Any) -> None:
        """
        Insert key/value pair into receipts.

        Raises:
            ReceiptError: If key is duplicate or value has a forbidden type.
        """
        existing_keys = [k for k, _ in self.payload]
        if key in existing_keys:
            raise ReceiptError(f"Duplicate key in receipts: '{key}'")

        value = _normalize_receipt_value(value, key)
        self.payload.append((key, value))

    def put_values(self, key: str, values: Iterable[bytes]) -> None:
        """
        Record an ordered list of byte values by count and digest.

        Stores "<key>.count" and "<key>.hash" rather than the values
        themselves, which keeps receipts small for large pools. The hash is
        BLAKE3 over the HSL1 frame of the list.

        Raises:
            SerializationError: If the values differ in length.
        """
        values = list(values)
        self.put(f"{key}.count", len(values))
        self.put(f"{key}.hash", blake3_hash(serialize_hash_list(values)))

    def digest(self) -> dict:
        """
        Returns the complete receipt digest with section_hash.

        Format:
          {
            "section": section,
            "format_version": registry["format_version"],
            "param_registry_hash": blake3_hash(stable_json(param_registry())),
            "payload": {key: value for key, value in self.payload},
            "section_hash": blake3_hash(stable_json({...all of the above...}))
          }
        """
        registry = param_registry()
        registry_hash = blake3_hash(_stable_json_bytes(registry))

        payload_dict = {k: v for k, v in self.payload}

        pre_digest = {
            "section": self.section,
            "format_version": registry["format_version"],
            "param_registry_hash": registry_hash,
            "payload": payload_dict
        }

        section_hash = blake3_hash(_stable_json_bytes(pre_digest))

        return {
            **pre_digest,
            "section_hash": section_hash
        }


def assert_double_run_equal(build_section_callable: Callable[[], Receipts]) -> None:
    """
    Calls build_section_callable() twice and verifies identical section_hash.

    Raises:
        DeterminismError: If section_hash differs between runs.

    Example:
        >>> def build():
        ...     r = Receipts("demo")
        ...     r.put("value", 42)
        ...     return r
        >>> assert_double_run_equal(build)  # passes
    """
    digest_a = build_section_callable().digest()
    digest_b = build_section_callable().digest()
    hash_a = digest_a["section_hash"]
    hash_b = digest_b["section_hash"]

    if hash_a == hash_b:
        return

    payload_a = digest_a["payload"]
    payload_b = digest_b["payload"]

    # First differing key in insertion order of run A, then keys only in B
    differing_key = None
    val_a = val_b = None
    for key in list(payload_a.keys()) + [k for k in payload_b if k not in payload_a]:
        val_a = payload_a.get(key, "<MISSING>")
        val_b = payload_b.get(key, "<MISSING>")
        if val_a != val_b:
            differing_key = key
            break

    raise DeterminismError(
        section=digest_a["section"],
        first_differing_key=differing_key,
        value_a=val_a if differing_key else None,
        value_b=val_b if differing_key else None,
        hash_a=hash_a,
        hash_b=hash_b
    )


def _stable_json_bytes(obj: Any) -> bytes:
    """Serialize to compact UTF-8 JSON with recursively sorted keys."""
    json_str = json.dumps(
        obj,
        sort_keys=True,
        ensure_ascii=False,
        separators=(',', ':')
    )
    return json_str.encode('utf-8')


def _normalize_receipt_value(value: Any, key: str) -> Any:
    """
    Validate a receipt value and convert bytes to upper-case hex.

    Tuples become lists so that the stored payload matches what JSON
    round-trips to.

    Raises:
        ReceiptError: If value contains forbidden types.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex().upper()

    if isinstance(value, float):
        raise ReceiptError(f"Floats forbidden in receipts (key: '{key}')")

    if isinstance(value, (list, tuple)):
        return [_normalize_receipt_value(item, f"{key}[{i}]") for i, item in enumerate(value)]

    if isinstance(value, dict):
        normalized = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise ReceiptError(
                    f"Dict keys must be strings in receipts (key: '{key}', dict_key: {k!r})"
                )
            normalized[k] = _normalize_receipt_value(v, f"{key}.{k}")
        return normalized

    raise ReceiptError(
        f"Invalid type in receipts: {type(value).__name__} (key: '{key}'). "
        f"Allowed: int, bool, str, None, bytes, list, tuple, dict."
    )


class ReceiptError(Exception):
    """Raised when receipt construction fails (duplicate key, invalid type)."""
    pass


class DeterminismError(Exception):
    """Raised when double-run produces different section hashes."""

    def __init__(
        self,
        section: str,
        first_differing_key: str | None,
        value_a: Any,
        value_b: Any,
        hash_a: str,
        hash_b: str
    ):
        self.section = section
        self.first_differing_key = first_differing_key
        self.value_a = value_a
        self.value_b = value_b
        self.hash_a = hash_a
        self.hash_b = hash_b

        msg = (
            f"Double-run hash mismatch in section '{section}'.\n"
            f"  First differing key: '{first_differing_key}'\n"
            f"  Value A: {value_a}\n"
            f"  Value B: {value_b}\n"
            f"  Hash A: {hash_a}\n"
            f"  Hash B: {hash_b}"
        )
        super().__init__(msg)
