"""
Hex Text & Hash-List I/O Tests

Tests:
  - to_hex / from_hex / is_hex_data rules
  - read_hash_list(): comments, blanks, whitespace, line-numbered errors, size limit
  - serialize_hash_list(): exact frame layout
  - random_pool(): sizes and seeded reproducibility
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from xorsum.core import (
    to_hex,
    from_hex,
    is_hex_data,
    read_hash_list,
    serialize_hash_list,
    random_pool,
    HashListError,
    SerializationError,
)
from xorsum.core import bytesio


# ============================================================================
# Hex text
# ============================================================================

def test_to_hex_is_upper_case():
    assert to_hex(b"\x0f\xa1\x00") == "0FA100"
    assert to_hex(b"") == ""


def test_is_hex_data():
    assert is_hex_data("00")
    assert is_hex_data("abCD09")

    assert not is_hex_data("")
    assert not is_hex_data(None)
    assert not is_hex_data("   ")
    assert not is_hex_data("ABC")      # odd length
    assert not is_hex_data("ZZ")
    assert not is_hex_data(" AB")      # whitespace is stripped by callers
    assert not is_hex_data("0x00")

    print("✓ is_hex_data accepts even-length hex only")


def test_from_hex():
    assert from_hex("ff80") == b"\xff\x80"
    assert from_hex("FF80") == b"\xff\x80"

    try:
        from_hex("F")
        assert False, "Odd-length hex must be rejected"
    except ValueError as e:
        assert "Invalid hash" in str(e)
        print(f"  ✓ Rejected: {e}")


# ============================================================================
# Hash-list files
# ============================================================================

def test_read_hash_list_skips_comments_and_blanks(tmp_path):
    path = tmp_path / "pool.txt"
    path.write_text(
        "; semicolon comment\n"
        "# hash comment\n"
        "\n"
        "  ff  \n"
        "\t80\n"
        "   \n"
        "0a\n"
    )

    assert read_hash_list(path) == [b"\xff", b"\x80", b"\x0a"]
    assert read_hash_list(str(path)) == [b"\xff", b"\x80", b"\x0a"]


def test_read_hash_list_empty_file(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("")
    assert read_hash_list(path) == []


def test_read_hash_list_reports_line_number(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("FF\n# ok\nNOTHEX\n80\n")

    with pytest.raises(HashListError) as info:
        read_hash_list(path)

    err = info.value
    assert err.line_no == 3
    assert err.path == str(path)
    assert f"{path}:3:" in str(err)
    assert "NOTHEX" in str(err)


def test_read_hash_list_size_limit(tmp_path, monkeypatch):
    path = tmp_path / "big.txt"
    path.write_text("FF\n" * 10)

    registry = bytesio.param_registry()
    registry["hash_list_max_bytes"] = 8
    monkeypatch.setattr(bytesio, "param_registry", lambda: registry)

    with pytest.raises(HashListError) as info:
        read_hash_list(path)
    assert info.value.line_no is None


def test_read_hash_list_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_hash_list(tmp_path / "missing.txt")


# ============================================================================
# Framed serialization
# ============================================================================

def test_serialize_hash_list_layout():
    stream = serialize_hash_list([b"\x01\x02", b"\xff\x00"])
    assert stream == (
        b"HSL1"
        + (2).to_bytes(4, "big")
        + (2).to_bytes(2, "big")
        + b"\x01\x02\xff\x00"
    )

    assert serialize_hash_list([]) == b"HSL1" + b"\x00" * 6


def test_serialize_hash_list_rejects_mixed_lengths():
    with pytest.raises(SerializationError):
        serialize_hash_list([b"\x01", b"\x01\x02"])


# ============================================================================
# Random demo data
# ============================================================================

def test_random_pool_sizes():
    target, pool = random_pool(4)
    assert len(target) == 4
    assert len(pool) == 4 * 8 * 12
    assert all(len(v) == 4 for v in pool)

    _, small = random_pool(2, factor=8)
    assert len(small) == 2 * 8 * 8


def test_random_pool_seed_is_reproducible():
    assert random_pool(4, seed=11) == random_pool(4, seed=11)
    assert random_pool(4, seed=11) != random_pool(4, seed=12)


def test_random_pool_rejects_non_positive_length():
    with pytest.raises(ValueError):
        random_pool(0)
