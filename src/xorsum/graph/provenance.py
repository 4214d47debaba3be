"""
Provenance Graph: shared-node DAG from target down to pool values

Every value in a solve result is explained by the two values XORed to make
it, recursively, until pool members are reached. Identical values collapse
to one node, so the structure is a DAG rather than a tree.

Representation:
  - nodes: arena (list) of ProvenanceNode, addressed by stable index
  - _index: value → node index (content-keyed; bytes hash by content)
  - children hold indices, never node objects

Each node carries a usage counter: 1 on creation, +1 for every later
lookup of the same value through the graph.

The root (index 0) stands for the target as the XOR of the computed hashes.
It is kept out of the value index: when the target value itself turns up as
a computed hash or as a combination parent, it gets an ordinary value node,
so the root is never its own descendant.
"""

import os
import sys
from typing import Dict, List, Tuple, TypedDict

from ..core.errors import InvariantViolation, raise_if_cancelled
from ..kernel.ops import is_zero


class ProvenanceNode:
    """One distinct value in the graph."""

    __slots__ = ("value", "children", "usage")

    def __init__(self, value: bytes):
        self.value = value
        self.children: List[int] = []
        self.usage = 1

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self):
        return (
            f"ProvenanceNode({self.value.hex().upper()}, "
            f"children={self.children}, usage={self.usage})"
        )


class ProvenanceStats(TypedDict):
    node_count: int
    edge_count: int
    leaf_count: int
    expanded_count: int   # nodes explained through a combination record
    shared_count: int     # nodes with usage > 1
    target_as_value: bool  # the target also occurs as an ordinary value node


class ProvenanceGraph:
    """
    Dedup store plus node arena for one build/reduce or build/render pass.

    The root node (index 0) holds the target and starts with usage 1. It is
    not registered in the value index.
    """

    ROOT = 0

    def __init__(self, root_value: bytes):
        self.nodes: List[ProvenanceNode] = []
        self._index: Dict[bytes, int] = {}
        self.nodes.append(ProvenanceNode(root_value))

    def _add(self, value: bytes) -> int:
        idx = len(self.nodes)
        self.nodes.append(ProvenanceNode(value))
        self._index[value] = idx
        return idx

    def get_or_add(self, value: bytes) -> Tuple[int, bool]:
        """
        Return (index, added) for value.

        An existing node has its usage incremented; a new node starts at 1.
        """
        idx = self._index.get(value)
        if idx is not None:
            self.nodes[idx].usage += 1
            return idx, False
        return self._add(value), True

    def attach(self, parent: int, value: bytes) -> Tuple[int, bool]:
        """Look up value (dedup-and-count) and append it to parent's children."""
        idx, added = self.get_or_add(value)
        self.nodes[parent].children.append(idx)
        return idx, added

    @property
    def root(self) -> ProvenanceNode:
        return self.nodes[self.ROOT]

    def node(self, idx: int) -> ProvenanceNode:
        return self.nodes[idx]

    def index_of(self, value: bytes) -> int | None:
        return self._index.get(value)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, value: bytes) -> bool:
        return value in self._index

    def topological_order(self, cancel=None) -> List[int]:
        """
        Node indices reachable from the root, parents before children.

        Raises:
            InvariantViolation: If a cycle is found.
        """
        # Iterative DFS post-order; state 1 = on path, 2 = finished
        state = [0] * len(self.nodes)
        post: List[int] = []
        stack: List[Tuple[int, int]] = [(self.ROOT, 0)]
        state[self.ROOT] = 1
        while stack:
            raise_if_cancelled(cancel, "provenance.order")
            idx, child_pos = stack[-1]
            children = self.nodes[idx].children
            if child_pos < len(children):
                stack[-1] = (idx, child_pos + 1)
                child = children[child_pos]
                if state[child] == 1:
                    raise InvariantViolation(
                        f"Cycle through {self.nodes[child].value.hex().upper()}",
                        stage="provenance.order"
                    )
                if state[child] == 0:
                    state[child] = 1
                    stack.append((child, 0))
            else:
                state[idx] = 2
                post.append(idx)
                stack.pop()
        post.reverse()
        return post

    def path_parity(self, cancel=None) -> List[int]:
        """
        Parity of the number of root-to-node reference paths, per node index.

        This is the multiplicity of each value in the full expansion of the
        target as an XOR sum. Unreachable nodes get 0.
        """
        parity = [0] * len(self.nodes)
        parity[self.ROOT] = 1
        for idx in self.topological_order(cancel):
            raise_if_cancelled(cancel, "provenance.parity")
            p = parity[idx]
            if not p:
                continue
            for child in self.nodes[idx].children:
                parity[child] ^= 1
        return parity

    def stats(self) -> ProvenanceStats:
        edge_count = sum(len(n.children) for n in self.nodes)
        leaf_count = sum(1 for n in self.nodes if n.is_leaf)
        return {
            "node_count": len(self.nodes),
            "edge_count": edge_count,
            "leaf_count": leaf_count,
            "expanded_count": len(self.nodes) - leaf_count,
            "shared_count": sum(1 for n in self.nodes if n.usage > 1),
            "target_as_value": self.root.value in self._index,
        }


def build_provenance(result, cancel=None) -> ProvenanceGraph:
    """
    Build the provenance DAG for a SolveResult.

    Algorithm:
      1. Root = target. Attach every computed hash to the root (dedup-and-count)
         and push the newly created nodes.
      2. Pop depth-first:
         - zero value → InvariantViolation
         - nonzero pool member → leaf
         - otherwise attach both parents from the combination record and push
           only the parents created by this lookup
         - no record → InvariantViolation (orphaned combination)

    Args:
        result: SolveResult from find_combination().
        cancel: Optional cancellation signal.

    Returns:
        ProvenanceGraph
    """
    target = result.target
    base = result.base_hashes()
    combinations = result.combinations

    graph = ProvenanceGraph(target)
    stack: List[int] = []

    for h in result.computed_hashes:
        raise_if_cancelled(cancel, "provenance.seed")
        idx, added = graph.attach(ProvenanceGraph.ROOT, h)
        if added:
            stack.append(idx)

    while stack:
        raise_if_cancelled(cancel, "provenance.walk")
        idx = stack.pop()
        node = graph.node(idx)

        if is_zero(node.value):
            raise InvariantViolation("Encountered a zero value", stage="provenance.walk")

        if node.value in base:
            continue

        record = combinations.get(node.value)
        if record is None:
            raise InvariantViolation(
                f"Orphaned combination: {node.value.hex().upper()} has no source",
                stage="provenance.walk"
            )

        left_idx, left_added = graph.attach(idx, record.left)
        right_idx, right_added = graph.attach(idx, record.right)
        if left_added:
            stack.append(left_idx)
        if right_added:
            stack.append(right_idx)

    if os.environ.get("XORSUM_DEBUG"):
        s = graph.stats()
        print(f"Provenance: {s['node_count']} nodes, {s['edge_count']} edges, "
              f"{s['shared_count']} shared", file=sys.stderr)

    return graph
