"""
XOR-Sum Runner

Entry points that chain the passes and the command-line interface:

  - solve():  find_combination → (optimize) build_provenance → reduce_to_base
  - render(): find_combination → build_provenance → emit_mermaid
  - solve_with_receipts(): solve() plus one receipt digest per pass
  - solve_with_determinism_check(): run twice, compare section hashes

Exit codes (CLI):
  0 success, 1 bad input, 2 unsolvable, 3 invariant violation, 130 cancelled
"""

import enum
import os
import sys
from typing import Dict, List, Sequence, Tuple

from .core import (
    Receipts,
    assert_double_run_equal,
    DeterminismError,
    to_hex,
    from_hex,
    read_hash_list,
    random_pool,
    HashListError,
    XorSumError,
    EmptyTarget,
    LengthMismatch,
    InsufficientCandidates,
    Unsolvable,
    InvariantViolation,
    Cancelled,
)
from .kernel.bits import as_bytes
from .kernel.ops import validate_xor as _validate_xor
from .solver import find_combination
from .graph import build_provenance, reduce_with_stats
from .emitters import emit_mermaid


class OptimizeLevel(enum.Enum):
    """How far solve() resolves derived values."""

    # Return computed hashes as found; may include derived values
    NONE = "none"
    # Resolve derived values back to pool members
    TO_BASE_HASHES = "to-base-hashes"


def _as_level(optimize) -> OptimizeLevel:
    if isinstance(optimize, OptimizeLevel):
        return optimize
    if isinstance(optimize, bool):
        return OptimizeLevel.TO_BASE_HASHES if optimize else OptimizeLevel.NONE
    raise TypeError(f"optimize must be bool or OptimizeLevel, got {optimize!r}")


def validate_xor(target: bytes, values: Sequence[bytes]) -> None:
    """
    Ensure that values XOR to target.

    Raises:
        InvariantViolation: If they do not.
        TypeError: If target or a value is not bytes-like.
    """
    values = [as_bytes(v, "value") for v in values]
    _validate_xor(as_bytes(target, "target"), values, stage="validate")


def solve(
    target: bytes,
    pool: Sequence[bytes],
    optimize=True,
    cancel=None
) -> List[bytes]:
    """
    Find values whose XOR equals target.

    Args:
        target: Requested value.
        pool: Candidate values (same length as target, at least 8 per target bit).
        optimize: True / OptimizeLevel.TO_BASE_HASHES returns pool members only,
            sorted by hex. False / OptimizeLevel.NONE returns the solver's
            computed hashes, which may include derived values.
        cancel: Optional cancellation signal (object with is_set()).

    Returns:
        list[bytes]: Distinct values whose XOR is target.

    Raises:
        EmptyTarget, LengthMismatch, InsufficientCandidates, Unsolvable,
        InvariantViolation, Cancelled.
        TypeError: Non-bytes input, or optimize is not a bool or OptimizeLevel.
    """
    values, _ = solve_with_receipts(target, pool, optimize, cancel)
    return values


def solve_with_receipts(
    target: bytes,
    pool: Sequence[bytes],
    optimize=True,
    cancel=None
) -> Tuple[List[bytes], Dict[str, dict]]:
    """
    solve() plus receipt digests keyed by section name.

    Sections: "solve" always; "provenance" and "reduce" when optimizing.
    """
    level = _as_level(optimize)
    target = as_bytes(target, "target")
    pool = [as_bytes(v, f"pool[{i}]") for i, v in enumerate(pool)]

    result = find_combination(target, pool, cancel)

    receipts: Dict[str, dict] = {}

    r_solve = Receipts("solve")
    r_solve.put("target", target)
    r_solve.put_values("pool", pool)
    r_solve.put("stats", dict(result.stats))
    r_solve.put_values("computed", result.computed_hashes)
    receipts["solve"] = r_solve.digest()

    if level is OptimizeLevel.NONE:
        return list(result.computed_hashes), receipts

    graph = build_provenance(result, cancel)
    r_prov = Receipts("provenance")
    r_prov.put("stats", dict(graph.stats()))
    receipts["provenance"] = r_prov.digest()

    reduced, reduce_stats = reduce_with_stats(graph, result, cancel)
    r_reduce = Receipts("reduce")
    r_reduce.put("stats", dict(reduce_stats))
    r_reduce.put_values("base", reduced)
    receipts["reduce"] = r_reduce.digest()

    return reduced, receipts


def solve_with_determinism_check(
    target: bytes,
    pool: Sequence[bytes],
    optimize=True,
    cancel=None
) -> Tuple[List[bytes], Dict[str, dict]]:
    """
    Solve twice and require identical receipts for every section.

    Raises:
        DeterminismError: If any section hash differs between the runs.
    """
    values, receipts = solve_with_receipts(target, pool, optimize, cancel)

    def build():
        values_b, receipts_b = solve_with_receipts(target, pool, optimize, cancel)
        r = Receipts("determinism")
        for section in sorted(receipts_b):
            r.put(section, receipts_b[section]["section_hash"])
        r.put_values("result", values_b)
        return r

    assert_double_run_equal(build)

    receipts["determinism"] = {
        "double_run_ok": True,
        "sections_checked": len(receipts),
    }
    return values, receipts


def render(
    target: bytes,
    pool: Sequence[bytes],
    sink,
    cancel=None,
    footer: bool = False
) -> dict:
    """
    Write the Mermaid flowchart of the unoptimized provenance graph to sink.

    The chart shows the graph as the solver built it, before reduction.

    Returns:
        MermaidReceipt counters.
    """
    result = find_combination(target, pool, cancel)
    graph = build_provenance(result, cancel)
    return emit_mermaid(graph, sink, cancel, footer=footer)


# ============================================================================
# CLI Entry Point
# ============================================================================

EXIT_OK = 0
EXIT_BAD_INPUT = 1
EXIT_UNSOLVABLE = 2
EXIT_INVARIANT = 3
EXIT_CANCELLED = 130


def _exit_code(err: XorSumError) -> int:
    if isinstance(err, (EmptyTarget, LengthMismatch, InsufficientCandidates)):
        return EXIT_BAD_INPUT
    if isinstance(err, Unsolvable):
        return EXIT_UNSOLVABLE
    if isinstance(err, Cancelled):
        return EXIT_CANCELLED
    return EXIT_INVARIANT


def main(argv=None) -> int:
    import argparse
    import json

    parser = argparse.ArgumentParser(
        prog="xorsum",
        description="Find pool values whose XOR equals a target value",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve for a hex target using a hash list file (one hex value per line)
  xorsum solve --target 0FF1CE... --pool hashes.txt

  # Keep derived values (faster, output not restricted to the pool)
  xorsum solve --target-file target.txt --pool hashes.txt --no-optimize

  # Mermaid flowchart of how the solution was built
  xorsum mermaid --target FF --pool masks.txt --footer

  # Random 32-byte demo
  xorsum demo --bytes 32 --seed 7

  # Check that a list XORs to a target
  xorsum validate --target FF --pool answer.txt
        """
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_inputs(p):
        group = p.add_mutually_exclusive_group(required=True)
        group.add_argument("--target", type=str, help="Target value as hex text")
        group.add_argument("--target-file", type=str,
                           help="File whose first hash line is the target")
        p.add_argument("--pool", type=str, required=True,
                       help="Hash list file (hex per line, ';' or '#' comments)")

    p_solve = sub.add_parser("solve", help="Solve and print one hex value per line")
    add_inputs(p_solve)
    p_solve.add_argument("--no-optimize", action="store_true",
                         help="Return computed hashes without reducing to pool values")
    p_solve.add_argument("--determinism-check", action="store_true",
                         help="Run twice and compare receipts")
    p_solve.add_argument("--receipts", type=str, default=None,
                         help="Write receipts JSON to this file")

    p_mermaid = sub.add_parser("mermaid", help="Print the provenance flowchart")
    add_inputs(p_mermaid)
    p_mermaid.add_argument("--footer", action="store_true",
                           help="Append a '%%%% lines: N' comment")

    p_validate = sub.add_parser("validate", help="Check that a hash list XORs to the target")
    add_inputs(p_validate)

    p_demo = sub.add_parser("demo", help="Solve a random target over a random pool")
    p_demo.add_argument("--bytes", type=int, default=32, help="Value length. Default: 32.")
    p_demo.add_argument("--seed", type=int, default=None, help="Seed for reproducible data")
    p_demo.add_argument("--no-optimize", action="store_true")

    args = parser.parse_args(argv)

    try:
        if args.command == "demo":
            target, pool = random_pool(args.bytes, seed=args.seed)
        else:
            if args.target is not None:
                target = from_hex(args.target.strip())
            else:
                lines = read_hash_list(args.target_file)
                if not lines:
                    print(f"Error: No hash in {args.target_file}", file=sys.stderr)
                    return EXIT_BAD_INPUT
                target = lines[0]
            pool = read_hash_list(args.pool)
    except (ValueError, HashListError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    try:
        if args.command == "validate":
            validate_xor(target, pool)
            print("OK")
            return EXIT_OK

        if args.command == "mermaid":
            render(target, pool, sys.stdout, footer=args.footer)
            return EXIT_OK

        optimize = not args.no_optimize
        if args.command == "demo":
            print(f"Trying to break a XOR sum for a {len(target) * 8} bit hash...")
            values, receipts = solve_with_receipts(target, pool, optimize)
        elif args.determinism_check:
            values, receipts = solve_with_determinism_check(target, pool, optimize)
        else:
            values, receipts = solve_with_receipts(target, pool, optimize)
    except InvariantViolation as e:
        label = "MISMATCH" if args.command == "validate" else "Error"
        print(f"{label}: {e}", file=sys.stderr)
        return EXIT_INVARIANT
    except DeterminismError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVARIANT
    except XorSumError as e:
        print(f"Error: {e}", file=sys.stderr)
        return _exit_code(e)

    for value in values:
        print(to_hex(value))
    if args.command == "demo":
        print(f"Hashes needed: {len(values)}")

    receipts_path = getattr(args, "receipts", None)
    if receipts_path:
        with open(receipts_path, 'w') as f:
            json.dump(receipts, f, indent=2)
        print(f"Receipts written to: {receipts_path}", file=sys.stderr)
    elif os.environ.get("XORSUM_DEBUG"):
        print(json.dumps(receipts, indent=2), file=sys.stderr)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
