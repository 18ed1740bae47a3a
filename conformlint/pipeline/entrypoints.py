"""Single-document entrypoints: check (one pass) and fix (to a fixed point)."""

from __future__ import annotations

from concurrent.futures import Executor
from pathlib import PurePath

from conformlint.config import LintConfig, resolve
from conformlint.fix import DEFAULT_MAX_PASSES, CancellationToken, FixEngine, FixOutcome, FixRunResult
from conformlint.pipeline.results import CheckRunResult
from conformlint.rules import RuleRegistry
from conformlint.tree import DocumentParser, ParseFailure


def run_check(
    text: str,
    path: str | PurePath,
    config: LintConfig,
    *,
    parser: DocumentParser,
    registry: RuleRegistry,
    executor: Executor | None = None,
) -> CheckRunResult:
    """Parse and evaluate once; the text is never modified."""
    active_rules = resolve(config, path, registry=registry)
    normalized = active_rules.path
    if active_rules.skipped:
        return CheckRunResult(path=normalized, source_text=text, diagnostics=(), skipped=True)

    outcome = FixEngine(parser=parser, active_rules=active_rules, executor=executor).check(text, normalized)
    if isinstance(outcome, ParseFailure):
        return CheckRunResult(
            path=normalized,
            source_text=text,
            diagnostics=(outcome.to_diagnostic(),),
            parse_failure=outcome,
        )
    return CheckRunResult(
        path=normalized,
        source_text=text,
        diagnostics=outcome.diagnostics,
        version=outcome.version,
        suppressed=outcome.suppressed,
    )


def run_fix(
    text: str,
    path: str | PurePath,
    config: LintConfig,
    *,
    parser: DocumentParser,
    registry: RuleRegistry,
    max_passes: int = DEFAULT_MAX_PASSES,
    cancel: CancellationToken | None = None,
    executor: Executor | None = None,
) -> FixRunResult:
    """Apply fixes pass after pass until nothing is left to fix or the cap is hit."""
    active_rules = resolve(config, path, registry=registry)
    if active_rules.skipped:
        return FixRunResult(
            path=active_rules.path,
            source_text=text,
            final_text=text,
            version=0,
            diagnostics=(),
            pass_count=1,
            outcome=FixOutcome.CONVERGED,
            skipped=True,
        )
    engine = FixEngine(
        parser=parser,
        active_rules=active_rules,
        max_passes=max_passes,
        executor=executor,
        cancel=cancel,
    )
    return engine.run(text, active_rules.path)
