"""
Core Tests - Registry, Hashing, Receipts

Tests:
  1. param_registry() completeness and frozen values
  2. blake3_hash() determinism, value-list hashes via the HSL1 frame
  3. Receipts payload rules (duplicates, floats, bytes as hex)
  4. assert_double_run_equal() on deterministic and drifting builders
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from xorsum.core import (
    param_registry,
    blake3_hash,
    serialize_hash_list,
    Receipts,
    assert_double_run_equal,
    ReceiptError,
    DeterminismError,
    SerializationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Test 1: param_registry()
# ═══════════════════════════════════════════════════════════════════════

def test_param_registry_completeness():
    """Registry has exactly the required keys with the frozen values."""
    reg = param_registry()

    required = {
        "format_version", "bit_order", "hex_case", "candidate_factor",
        "random_pool_factor", "hash_algo", "diagram_header",
        "diagram_comment_prefix", "hash_list_comment_prefixes",
        "hash_list_max_bytes", "byte_frame_tags"
    }
    assert set(reg.keys()) == required

    assert reg["bit_order"] == "msb-first"
    assert reg["hex_case"] == "upper"
    assert reg["candidate_factor"] == 8
    assert reg["random_pool_factor"] == 12
    assert reg["hash_algo"] == "BLAKE3"
    assert reg["diagram_header"] == "flowchart TD"
    assert reg["diagram_comment_prefix"] == "%%"
    assert reg["hash_list_comment_prefixes"] == [";", "#"]
    assert reg["byte_frame_tags"]["HASH_LIST"] == "HSL1"

    print("✅ PASS: param_registry() completeness")


def test_param_registry_is_fresh_each_call():
    """Mutating a returned registry never leaks into the next call."""
    reg = param_registry()
    reg["candidate_factor"] = 1
    assert param_registry()["candidate_factor"] == 8


# ═══════════════════════════════════════════════════════════════════════
# Test 2: Hashing
# ═══════════════════════════════════════════════════════════════════════

def test_blake3_known_vector():
    """BLAKE3 of the empty string is the published test vector."""
    assert blake3_hash(b"") == "af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9adc112b7cc9a93cae41f3262"
    assert blake3_hash(b"\x01\x02") == blake3_hash(b"\x01\x02")
    assert blake3_hash(b"\x01\x02") != blake3_hash(b"\x02\x01")


def list_hash(values):
    r = Receipts("framing")
    r.put_values("v", values)
    return r.digest()["payload"]["v.hash"]


def test_value_list_hash_framing():
    """Value boundaries, order and count all change the list hash."""
    one = list_hash([b"\x01\x02"])
    two = list_hash([b"\x01", b"\x02"])
    swapped = list_hash([b"\x02", b"\x01"])
    empty = list_hash([])
    empty_value = list_hash([b""])

    assert len({one, two, swapped, empty, empty_value}) == 5
    assert list_hash(iter([b"\x01", b"\x02"])) == two

    print("✓ Framing distinguishes boundaries, order and count")


# ═══════════════════════════════════════════════════════════════════════
# Test 3: Receipts payload rules
# ═══════════════════════════════════════════════════════════════════════

def test_receipts_digest_structure():
    """Digest carries section, version, registry hash, payload and section hash."""
    r = Receipts("unit")
    r.put("count", 3)
    r.put("value", b"\xab\x01")
    r.put("nested", {"values": (b"\x0f", 2), "flag": True})
    digest = r.digest()

    assert digest["section"] == "unit"
    assert digest["format_version"] == param_registry()["format_version"]
    assert len(digest["param_registry_hash"]) == 64
    assert len(digest["section_hash"]) == 64
    assert digest["payload"] == {
        "count": 3,
        "value": "AB01",
        "nested": {"values": ["0F", 2], "flag": True},
    }


def test_receipts_put_values():
    """put_values stores count and digest, not the values."""
    r = Receipts("values")
    r.put_values("pool", [b"\x01", b"\x02"])
    payload = r.digest()["payload"]

    assert payload["pool.count"] == 2
    assert payload["pool.hash"] == blake3_hash(serialize_hash_list([b"\x01", b"\x02"]))


def test_receipts_put_values_rejects_mixed_lengths():
    r = Receipts("values")
    with pytest.raises(SerializationError):
        r.put_values("pool", [b"\x01", b"\x01\x02"])


def test_receipts_rejects_duplicates_and_floats():
    """Duplicate keys and floats (also nested) are refused."""
    r = Receipts("bad")
    r.put("k", 1)

    try:
        r.put("k", 2)
        assert False, "Duplicate key must be rejected"
    except ReceiptError as e:
        print(f"  ✓ Duplicate key rejected: {e}")

    try:
        r.put("elapsed", 0.5)
        assert False, "Floats must be rejected"
    except ReceiptError as e:
        print(f"  ✓ Float rejected: {e}")

    with pytest.raises(ReceiptError):
        r.put("nested_bad", {"data": [1, 2, 3.5]})

    with pytest.raises(ReceiptError):
        r.put("bad_key", {1: "x"})

    with pytest.raises(ReceiptError):
        r.put("object", object())


# ═══════════════════════════════════════════════════════════════════════
# Test 4: Double-run checker
# ═══════════════════════════════════════════════════════════════════════

def test_double_run_equal_passes_for_deterministic_builder():
    def build():
        r = Receipts("stable")
        r.put("target", b"\xff")
        r.put_values("pool", [b"\x80", b"\x40"])
        return r

    assert_double_run_equal(build)


def test_double_run_equal_reports_first_differing_key():
    """A builder that drifts between runs raises DeterminismError with details."""
    calls = []

    def build():
        calls.append(1)
        r = Receipts("drifting")
        r.put("same", 1)
        r.put("run", len(calls))
        return r

    with pytest.raises(DeterminismError) as info:
        assert_double_run_equal(build)

    err = info.value
    assert err.section == "drifting"
    assert err.first_differing_key == "run"
    assert err.value_a == 1
    assert err.value_b == 2
    assert err.hash_a != err.hash_b
