"""Structural lint and fix engine."""

from conformlint.pipeline import (
    CheckRunResult,
    DocumentResult,
    FixOutcome,
    FixRunResult,
    SourceDocument,
    exit_code,
    run_batch,
    run_check,
    run_fix,
)

__all__ = [
    "CheckRunResult",
    "DocumentResult",
    "FixOutcome",
    "FixRunResult",
    "SourceDocument",
    "exit_code",
    "run_batch",
    "run_check",
    "run_fix",
]
