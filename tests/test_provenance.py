"""
Provenance Graph & Reducer Tests

Hand-built SolveResults pin down shared nodes, the target appearing as an
ordinary value, orphaned combinations and path-parity reduction.
"""

import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from xorsum.solver import find_combination, CombinationRecord, SolveResult
from xorsum.graph import (
    ProvenanceGraph,
    build_provenance,
    reduce_to_base,
    reduce_with_stats,
)
from xorsum.core import InvariantViolation, Cancelled, random_pool
from xorsum.kernel import xor_sum


def make_result(target, pool, computed, records):
    """SolveResult with the given combination records (left, right, result)."""
    combinations = {r: CombinationRecord(a, b, r) for a, b, r in records}
    return SolveResult(target, pool, computed, combinations, stats={})


SHARED_POOL = [b"\x01", b"\x02", b"\x04", b"\x08"]

# 0C = 07 ^ 0B, both built on the shared intermediate 03 = 01 ^ 02
SHARED = dict(
    target=b"\x0c",
    pool=SHARED_POOL,
    computed=[b"\x07", b"\x0b"],
    records=[
        (b"\x01", b"\x02", b"\x03"),
        (b"\x03", b"\x04", b"\x07"),
        (b"\x03", b"\x08", b"\x0b"),
    ],
)


# ============================================================================
# Graph structure
# ============================================================================

def test_graph_dedup_and_usage():
    graph = ProvenanceGraph(b"\xff")
    a, added_a = graph.attach(ProvenanceGraph.ROOT, b"\x80")
    b, added_b = graph.attach(ProvenanceGraph.ROOT, b"\x80")

    assert a == b
    assert added_a and not added_b
    assert graph.node(a).usage == 2
    assert graph.root.children == [a, a]
    assert b"\x80" in graph
    assert graph.index_of(b"\x80") == a
    assert len(graph) == 2


def test_root_is_not_indexed():
    graph = ProvenanceGraph(b"\x40")
    assert b"\x40" not in graph

    idx, added = graph.get_or_add(b"\x40")
    assert added
    assert idx != ProvenanceGraph.ROOT


def test_shared_intermediate_node():
    graph = build_provenance(make_result(**SHARED))

    idx = graph.index_of(b"\x03")
    assert idx is not None
    assert graph.node(idx).usage == 2
    assert [graph.node(c).value for c in graph.node(idx).children] == [b"\x01", b"\x02"]
    # 03 is expanded once even though two values refer to it
    assert graph.node(graph.index_of(b"\x01")).usage == 1

    stats = graph.stats()
    assert stats["node_count"] == 8
    assert stats["edge_count"] == 8
    assert stats["shared_count"] == 1
    assert stats["target_as_value"] is False

    order = graph.topological_order()
    assert order[0] == ProvenanceGraph.ROOT
    assert order.index(graph.index_of(b"\x07")) < order.index(idx)
    assert order.index(graph.index_of(b"\x0b")) < order.index(idx)


def test_target_as_ordinary_value():
    pool = [b"\xc0", b"\x80", b"\x20", b"\x10", b"\x08", b"\x04", b"\x02", b"\x01"]
    result = find_combination(b"\x40", pool)
    graph = build_provenance(result)

    stats = graph.stats()
    assert stats["target_as_value"] is True
    idx = graph.index_of(b"\x40")
    assert [graph.node(c).value for c in graph.node(idx).children] == [b"\x80", b"\xc0"]
    # No cycle back to the root
    assert graph.topological_order()[0] == ProvenanceGraph.ROOT


def test_orphaned_combination():
    result = make_result(b"\x03", [b"\x01", b"\x02"], [b"\x03"], records=[])
    with pytest.raises(InvariantViolation) as info:
        build_provenance(result)
    assert info.value.stage == "provenance.walk"
    assert "Orphaned" in str(info.value)


def test_zero_value():
    result = make_result(b"\x01", [b"\x01"], [b"\x00", b"\x01"], records=[])
    with pytest.raises(InvariantViolation) as info:
        build_provenance(result)
    assert info.value.stage == "provenance.walk"


def test_cycle_detected():
    graph = ProvenanceGraph(b"\x01")
    a, _ = graph.attach(ProvenanceGraph.ROOT, b"\x02")
    b, _ = graph.attach(a, b"\x03")
    graph.attach(b, b"\x02")

    with pytest.raises(InvariantViolation) as info:
        graph.topological_order()
    assert info.value.stage == "provenance.order"


# ============================================================================
# Reduction
# ============================================================================

def test_reduce_shared_node_by_path_parity():
    """Odd usage would keep 01 and 02; path parity cancels them."""
    result = make_result(**SHARED)
    graph = build_provenance(result)

    reduced, stats = reduce_with_stats(graph, result)
    assert reduced == [b"\x04", b"\x08"]
    assert xor_sum(reduced, 1) == b"\x0c"
    assert stats["usage_parity_mismatches"] == 2
    assert stats["base_count"] == 2

    print(f"  ✓ Reduced to {[v.hex().upper() for v in reduced]}")


def test_reduce_target_in_pool():
    # 03 = 07 ^ 04, where 07 = 03 ^ 04: the 04 references cancel
    result = make_result(
        b"\x03", [b"\x03", b"\x04"], [b"\x07", b"\x04"],
        records=[(b"\x03", b"\x04", b"\x07")],
    )
    graph = build_provenance(result)
    assert reduce_to_base(graph, result) == [b"\x03"]


def test_reduce_derived_example():
    pool = [b"\xc0", b"\x80", b"\x20", b"\x10", b"\x08", b"\x04", b"\x02", b"\x01"]

    result = find_combination(b"\x41", pool)
    assert reduce_to_base(build_provenance(result), result) == [b"\x01", b"\x80", b"\xc0"]

    result = find_combination(b"\x40", pool)
    assert reduce_to_base(build_provenance(result), result) == [b"\x80", b"\xc0"]


@pytest.mark.parametrize("seed", [7, 8, 9])
def test_reduce_random_pools(seed):
    target, pool = random_pool(4, seed=seed)
    result = find_combination(target, pool)
    reduced = reduce_to_base(build_provenance(result), result)

    assert xor_sum(reduced, 4) == target
    assert len(set(reduced)) == len(reduced)
    assert set(reduced) <= set(pool)
    assert reduced == sorted(reduced, key=lambda v: v.hex().upper())


def test_cancelled_build_and_reduce():
    event = threading.Event()
    result = make_result(**SHARED)
    graph = build_provenance(result, event)

    event.set()
    with pytest.raises(Cancelled) as info:
        build_provenance(result, event)
    assert info.value.stage == "provenance.seed"

    with pytest.raises(Cancelled):
        reduce_to_base(graph, result, event)
