"""
Core Component: Error Taxonomy

Every outcome of a solve/reduce/render call other than success is one of
these classes. Input errors are raised before any bit-sweep work;
InvariantViolation marks a defect in the solver and is never recovered.
"""


class XorSumError(Exception):
    """Base class for all solver outcomes other than success."""
    pass


# ============================================================================
# Input errors (checked before any computation)
# ============================================================================

class EmptyTarget(XorSumError):
    """Raised when the target has zero length."""

    def __init__(self):
        super().__init__("Target hash has zero length")


class LengthMismatch(XorSumError):
    """Raised when a pool entry's length differs from the target's."""

    def __init__(self, index: int, expected: int, actual: int):
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Pool entry {index} has length {actual}, expected {expected}"
        )


class InsufficientCandidates(XorSumError):
    """Raised when the pool holds fewer entries than the target has bits."""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f"Too few candidate values: got {actual}, need at least {required}"
        )


# ============================================================================
# Computation outcomes
# ============================================================================

class Unsolvable(XorSumError):
    """Raised when no working entry has a pivot bit at some position."""

    def __init__(self, bit: int):
        self.bit = bit
        super().__init__(
            f"No pivot at bit {bit}. The candidate pool is likely not diverse enough."
        )


class InvariantViolation(XorSumError):
    """Raised on internal inconsistency (zero node, orphaned combination, XOR mismatch)."""

    def __init__(self, message: str, stage: str = "unknown"):
        self.stage = stage
        super().__init__(f"[{stage}] {message}")


class Cancelled(XorSumError):
    """Raised when the cooperative cancellation signal is observed."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Cancelled during {stage}")


def raise_if_cancelled(cancel, stage: str) -> None:
    """
    Poll a cancellation signal.

    Args:
        cancel: None, or any object exposing is_set() -> bool
            (threading.Event works as-is).
        stage: Loop name reported in the Cancelled outcome.

    Raises:
        Cancelled: If the signal is set.
    """
    if cancel is not None and cancel.is_set():
        raise Cancelled(stage)
