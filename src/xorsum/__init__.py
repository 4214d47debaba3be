"""
XOR-Sum Solver

Find values from a candidate pool whose bytewise XOR equals a target,
with a provenance graph explaining every derived value.
"""

__version__ = "0.1.0"

from .core import (
    XorSumError,
    EmptyTarget,
    LengthMismatch,
    InsufficientCandidates,
    Unsolvable,
    InvariantViolation,
    Cancelled,
    DeterminismError,
)
from .solver import find_combination, SolveResult, CombinationRecord
from .graph import build_provenance, reduce_to_base, ProvenanceGraph
from .runner import (
    OptimizeLevel,
    solve,
    solve_with_receipts,
    solve_with_determinism_check,
    render,
    validate_xor,
)

__all__ = [
    # Entry points
    "solve",
    "render",
    "validate_xor",
    "OptimizeLevel",
    "solve_with_receipts",
    "solve_with_determinism_check",

    # Passes
    "find_combination",
    "SolveResult",
    "CombinationRecord",
    "build_provenance",
    "reduce_to_base",
    "ProvenanceGraph",

    # Errors
    "XorSumError",
    "EmptyTarget",
    "LengthMismatch",
    "InsufficientCandidates",
    "Unsolvable",
    "InvariantViolation",
    "Cancelled",
    "DeterminismError",
]
