"""
Base-Hash Reducer: collapse a provenance graph to pool values only

The target equals the XOR of its leaves, each counted once per path from
the root. Leaves reached an even number of times cancel; the rest are the
answer.

Multiplicity here is path parity, not raw usage count. The two agree while
every shared node is a leaf; once an intermediate node is shared, its
children are attached once but contribute once per path through it, and
only path parity keeps the XOR sum equal to the target.
"""

import os
import sys
from typing import List, TypedDict

from ..core.bytesio import to_hex
from ..core.errors import raise_if_cancelled
from ..kernel.ops import is_zero, validate_xor
from .provenance import ProvenanceGraph


class ReduceStats(TypedDict):
    leaves_scanned: int
    odd_leaves: int
    base_count: int
    usage_parity_mismatches: int   # leaves where odd usage != odd path count


def reduce_to_base(graph: ProvenanceGraph, result, cancel=None) -> List[bytes]:
    """
    Return the pool values whose XOR equals the target.

    Args:
        graph: ProvenanceGraph built from result.
        result: The SolveResult the graph was built from.
        cancel: Optional cancellation signal.

    Returns:
        list[bytes]: Distinct nonzero pool values, sorted by upper-case hex.
            Empty when the target cancels exactly (e.g. all-zero target).

    Raises:
        InvariantViolation: If the reduced list does not XOR to the target.
        Cancelled: Signal observed.
    """
    values, _ = reduce_with_stats(graph, result, cancel)
    return values


def reduce_with_stats(graph: ProvenanceGraph, result, cancel=None) -> tuple[List[bytes], ReduceStats]:
    """reduce_to_base() plus counters for receipts."""
    base = result.base_hashes()
    parity = graph.path_parity(cancel)

    reduced: List[bytes] = []
    leaves_scanned = 0
    odd_leaves = 0
    mismatches = 0
    for idx, node in enumerate(graph.nodes):
        raise_if_cancelled(cancel, "reduce.scan")
        # The root is the sum itself, never a summand
        if idx == ProvenanceGraph.ROOT or not node.is_leaf:
            continue
        leaves_scanned += 1
        if (node.usage % 2) != parity[idx]:
            mismatches += 1
        if not parity[idx]:
            continue
        odd_leaves += 1
        if not is_zero(node.value) and node.value in base:
            reduced.append(node.value)

    reduced.sort(key=to_hex)
    validate_xor(result.target, reduced, stage="reduce.result")

    if os.environ.get("XORSUM_DEBUG"):
        print(f"Reduced: {len(reduced)} hashes", file=sys.stderr)

    stats: ReduceStats = {
        "leaves_scanned": leaves_scanned,
        "odd_leaves": odd_leaves,
        "base_count": len(reduced),
        "usage_parity_mismatches": mismatches,
    }
    return reduced, stats
