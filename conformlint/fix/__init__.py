"""Edit composition and the fix-to-fixed-point loop."""

from conformlint.fix.compose import PatchResult, apply_patch, compose, validate_fix
from conformlint.fix.engine import FixEngine, FixRunResult, PassRecord
from conformlint.fix.state import DEFAULT_MAX_PASSES, CancellationToken, FixOutcome, FixState

__all__ = [
    "DEFAULT_MAX_PASSES",
    "CancellationToken",
    "FixEngine",
    "FixOutcome",
    "FixRunResult",
    "FixState",
    "PassRecord",
    "PatchResult",
    "apply_patch",
    "compose",
    "validate_fix",
]
