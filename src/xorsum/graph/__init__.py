"""
Provenance graph and base-hash reduction.
"""

from .provenance import (
    ProvenanceNode,
    ProvenanceGraph,
    ProvenanceStats,
    build_provenance
)
from .reduce import reduce_to_base, reduce_with_stats, ReduceStats

__all__ = [
    "ProvenanceNode",
    "ProvenanceGraph",
    "ProvenanceStats",
    "build_provenance",
    "reduce_to_base",
    "reduce_with_stats",
    "ReduceStats",
]
