"""
Linear Solver: bit-sweep elimination over GF(2)

Find values derived from a candidate pool whose XOR equals a target, and
record how every derived value was produced.

Per bit position i (0 = most significant bit of the first byte):
  1. Contribution pass: every working entry whose bit i equals the residual's
     current bit i is XORed into the accumulator and the residual, and its
     value is appended to the output list. The residual is updated in place,
     so later entries compare against the updated bit.
  2. Pivot: first working entry with bit i set. None → Unsolvable.
  3. Elimination: entries with bit i set (other than the pivot and exact
     copies of it) are replaced by entry XOR pivot; each new value is
     recorded as a CombinationRecord.

Working values are packed into ints (kernel.bits.pack) for word-level XOR;
values leave this module as bytes.
"""

import os
import sys
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple, TypedDict

from .core.errors import (
    EmptyTarget,
    LengthMismatch,
    InsufficientCandidates,
    Unsolvable,
    InvariantViolation,
    raise_if_cancelled
)
from .core.registry import param_registry
from .kernel.bits import as_bytes, pack, unpack, bit_mask
from .kernel.ops import is_zero, only_odd_ones, validate_xor


class CombinationRecord:
    """
    A derived value and the two values XORed to produce it.

    Invariant: left XOR right == result, checked on construction.
    """

    __slots__ = ("left", "right", "result")

    def __init__(self, left: bytes, right: bytes, result: bytes):
        if not (len(left) == len(right) == len(result)):
            raise InvariantViolation(
                f"Combination operands differ in length: "
                f"{len(left)}, {len(right)}, {len(result)}",
                stage="solve.combination"
            )
        if pack(left) ^ pack(right) != pack(result):
            raise InvariantViolation(
                f"{left.hex().upper()} ^ {right.hex().upper()} != {result.hex().upper()}",
                stage="solve.combination"
            )
        self.left = left
        self.right = right
        self.result = result

    @property
    def parents(self) -> Tuple[bytes, bytes]:
        return (self.left, self.right)

    def __eq__(self, other):
        if not isinstance(other, CombinationRecord):
            return NotImplemented
        return (self.left, self.right, self.result) == (other.left, other.right, other.result)

    def __hash__(self):
        return hash((self.left, self.right, self.result))

    def __repr__(self):
        return (
            f"CombinationRecord({self.left.hex().upper()} ^ "
            f"{self.right.hex().upper()} = {self.result.hex().upper()})"
        )


class SolveStats(TypedDict):
    bits_swept: int
    contributions: int          # entries appended by contribution passes
    combinations_recorded: int  # elimination products (including overwrites)
    duplicates_dropped: int     # entries equal to the pivot, excluding the pivot
    zero_contributions: int     # all-zero values removed from the output list
    computed_count: int         # len(computed_hashes)


class SolveResult:
    """
    Output of one find_combination() call.

    Attributes:
        target: The requested value.
        pool: The candidate pool, in input order.
        computed_hashes: Values whose XOR is target; no value repeats.
            May contain derived (non-pool) values.
        combinations: Read-only map derived value → CombinationRecord.
        stats: Counters from the sweep.
    """

    __slots__ = ("target", "pool", "computed_hashes", "combinations", "stats")

    def __init__(
        self,
        target: bytes,
        pool: Sequence[bytes],
        computed_hashes: Sequence[bytes],
        combinations: Dict[bytes, CombinationRecord],
        stats: SolveStats
    ):
        self.target = bytes(target)
        self.pool = tuple(bytes(v) for v in pool)
        self.computed_hashes = tuple(computed_hashes)
        self.combinations: Mapping[bytes, CombinationRecord] = MappingProxyType(combinations)
        self.stats = stats

    def base_hashes(self) -> frozenset:
        """Nonzero pool members, the values the reducer may return."""
        return frozenset(v for v in self.pool if not is_zero(v))


def check_inputs(target: bytes, pool: Sequence[bytes]) -> None:
    """
    Validate target and pool before any computation.

    Raises:
        EmptyTarget: Target has zero length.
        LengthMismatch: Some pool entry differs in length from target.
        InsufficientCandidates: len(pool) < candidate_factor * len(target).
    """
    if len(target) == 0:
        raise EmptyTarget()

    n = len(target)
    for i, value in enumerate(pool):
        if len(value) != n:
            raise LengthMismatch(index=i, expected=n, actual=len(value))

    required = param_registry()["candidate_factor"] * n
    if len(pool) < required:
        raise InsufficientCandidates(required=required, actual=len(pool))


def find_combination(
    target: bytes,
    pool: Sequence[bytes],
    cancel=None
) -> SolveResult:
    """
    Run the bit sweep and return the combination with its provenance map.

    Args:
        target: Requested value (n bytes, n > 0).
        pool: Candidate values, each n bytes, at least 8n of them.
        cancel: Optional cancellation signal (object with is_set()).

    Returns:
        SolveResult. An all-zero target returns no computed hashes without
        sweeping, so it never raises Unsolvable.

    Raises:
        TypeError: Target or a pool entry is not bytes-like.
        EmptyTarget, LengthMismatch, InsufficientCandidates: Bad input.
        Unsolvable: Some bit position has no pivot.
        InvariantViolation: Accumulator or final XOR does not match target.
        Cancelled: Signal observed.
    """
    target = as_bytes(target, "target")
    pool = [as_bytes(v, f"pool[{i}]") for i, v in enumerate(pool)]
    check_inputs(target, pool)

    n_bytes = len(target)
    n_bits = n_bytes * 8

    raise_if_cancelled(cancel, "solve.start")

    # The empty combination already sums to zero; no pivot is needed
    if is_zero(target):
        empty_stats: SolveStats = {
            "bits_swept": 0,
            "contributions": 0,
            "combinations_recorded": 0,
            "duplicates_dropped": 0,
            "zero_contributions": 0,
            "computed_count": 0,
        }
        return SolveResult(target, pool, (), {}, empty_stats)

    # (provenance_mask, data): mask marks originating pool indices
    working: List[Tuple[int, int]] = [(1 << idx, pack(v)) for idx, v in enumerate(pool)]
    ans = 0
    residual = pack(target)
    appended: List[int] = []
    combinations: Dict[bytes, CombinationRecord] = {}

    combinations_recorded = 0
    duplicates_dropped = 0

    for i in range(n_bits):
        raise_if_cancelled(cancel, "solve.sweep")
        sel = bit_mask(i, n_bits)

        # (1) Contribution pass
        for _, data in working:
            raise_if_cancelled(cancel, "solve.contribution")
            if (data & sel) == (residual & sel):
                ans ^= data
                residual ^= data
                appended.append(data)

        # (2) Pivot selection
        pivot_pos = None
        for pos, (_, data) in enumerate(working):
            if data & sel:
                pivot_pos = pos
                break
        if pivot_pos is None:
            raise Unsolvable(bit=i)
        pivot_mask, pivot_data = working[pivot_pos]
        pivot_bytes = unpack(pivot_data, n_bytes)

        # (3) Elimination
        next_working: List[Tuple[int, int]] = []
        for pos, (mask, data) in enumerate(working):
            raise_if_cancelled(cancel, "solve.elimination")
            if not data & sel:
                next_working.append((mask, data))
                continue
            if pos == pivot_pos:
                continue
            if data == pivot_data:
                duplicates_dropped += 1
                continue
            new_data = data ^ pivot_data
            new_bytes = unpack(new_data, n_bytes)
            combinations[new_bytes] = CombinationRecord(
                unpack(data, n_bytes), pivot_bytes, new_bytes
            )
            combinations_recorded += 1
            next_working.append((mask ^ pivot_mask, new_data))
        working = next_working

    if ans != pack(target):
        raise InvariantViolation(
            f"Accumulator {unpack(ans, n_bytes).hex().upper()} does not match target",
            stage="solve.accumulator"
        )

    nonzero = [unpack(w, n_bytes) for w in appended if w != 0]
    computed = only_odd_ones(nonzero)
    validate_xor(target, computed, stage="solve.result")

    if os.environ.get("XORSUM_DEBUG"):
        print(f"Reached  {target.hex().upper()}", file=sys.stderr)
        print(f"Required {len(computed)} hashes "
              f"({len(appended)} contributions, {len(combinations)} combinations)",
              file=sys.stderr)

    stats: SolveStats = {
        "bits_swept": n_bits,
        "contributions": len(appended),
        "combinations_recorded": combinations_recorded,
        "duplicates_dropped": duplicates_dropped,
        "zero_contributions": len(appended) - len(nonzero),
        "computed_count": len(computed),
    }

    return SolveResult(target, pool, computed, combinations, stats)
