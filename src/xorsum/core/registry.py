"""
Core Component: Parameter Registry

Frozen constants for deterministic solver operation.
Bit order, hex text form, candidate sizing and diagram format are defined
here once and hashed into every section receipt.

No randomness, no environment leakage, no optionals.
"""


def param_registry() -> dict:
    """
    Returns a frozen mapping of all global constants used by the solver.

    Keys and values are JSON-serializable primitives or lists/tuples.
    This registry is hashed into every section receipt to prove parametric consistency.

    Returns:
        dict: Frozen parameter mapping with exact keys and values.

    Raises:
        RegistryError: If any required key is missing (internal consistency check).
    """
    registry = {
        # Version binding
        "format_version": "1.0",

        # Bit position 0 is the most significant bit of the first byte
        "bit_order": "msb-first",

        # Hex text form used for sorting, diagrams and hash lists
        "hex_case": "upper",

        # Minimum pool size is candidate_factor * bit length of the target
        "candidate_factor": 8,

        # Pool size used by the random demo generator (factor * bit length)
        "random_pool_factor": 12,

        # Hashing
        "hash_algo": "BLAKE3",

        # Mermaid flowchart output
        "diagram_header": "flowchart TD",
        "diagram_comment_prefix": "%%",

        # Hash list text files
        "hash_list_comment_prefixes": [";", "#"],
        "hash_list_max_bytes": 1024 * 1024 * 100,

        # Byte frame tags for serialization (ASCII 4-byte tags)
        "byte_frame_tags": {
            "HASH_LIST": "HSL1"
        }
    }

    required_keys = {
        "format_version", "bit_order", "hex_case", "candidate_factor",
        "random_pool_factor", "hash_algo", "diagram_header",
        "diagram_comment_prefix", "hash_list_comment_prefixes",
        "hash_list_max_bytes", "byte_frame_tags"
    }

    actual_keys = set(registry.keys())
    if actual_keys != required_keys:
        missing = required_keys - actual_keys
        extra = actual_keys - required_keys
        raise RegistryError(
            f"param_registry() key mismatch. Missing: {missing}, Extra: {extra}"
        )

    return registry


class RegistryError(Exception):
    """Raised when param_registry() has missing or unexpected keys."""
    pass
