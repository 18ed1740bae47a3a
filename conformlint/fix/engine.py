"""Bounded parse -> evaluate -> compose -> apply loop for one document."""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field, replace

from conformlint.config import ActiveRuleSet
from conformlint.diagnostics import Diagnostic, has_errors
from conformlint.fix.compose import PatchResult, apply_patch, compose
from conformlint.fix.state import DEFAULT_MAX_PASSES, CancellationToken, FixOutcome, FixState
from conformlint.lint import DiagnosticSet, evaluate_tree
from conformlint.tree import DocumentParser, ParseFailure, Tree, parse_document

logger = logging.getLogger(__name__)

_TERMINAL_OUTCOMES = {
    FixState.CONVERGED: FixOutcome.CONVERGED,
    FixState.CAPPED: FixOutcome.CAPPED,
    FixState.FAILED: FixOutcome.FAILED,
    FixState.CANCELLED: FixOutcome.CANCELLED,
}


@dataclass(frozen=True, slots=True)
class PassRecord:
    """Summary of one evaluate/compose step."""

    version: int
    diagnostics: int
    accepted: int
    rejected: int
    malformed: int
    applied: bool


@dataclass(frozen=True, slots=True)
class FixRunResult:
    """Result of driving one document to a fixed point."""

    path: str
    source_text: str
    final_text: str
    version: int
    diagnostics: tuple[Diagnostic, ...]
    pass_count: int
    outcome: FixOutcome
    applied: tuple[Diagnostic, ...] = ()
    rejected: tuple[Diagnostic, ...] = ()
    passes: tuple[PassRecord, ...] = ()
    trace: tuple[FixState, ...] = ()
    parse_failure: ParseFailure | None = None
    skipped: bool = False

    @property
    def changed(self) -> bool:
        return self.final_text != self.source_text

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)

    @property
    def fixable(self) -> tuple[Diagnostic, ...]:
        return tuple(diagnostic for diagnostic in self.diagnostics if diagnostic.is_fixable)


@dataclass(slots=True)
class _RunState:
    text: str
    version: int = 0
    applied_passes: int = 0
    tree: Tree | None = None
    evaluation: DiagnosticSet | None = None
    patch: PatchResult | None = None
    failure: ParseFailure | None = None
    applied: list[Diagnostic] = field(default_factory=list)
    passes: list[PassRecord] = field(default_factory=list)
    trace: list[FixState] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class FixEngine:
    """Runs passes over one document until no fix applies or the cap is hit.

    Each pass parses the current version, evaluates the active rules,
    composes one non-overlapping patch and applies it, producing the next
    version. Cancellation is only observed between passes, so the text
    handed back is always a fully applied version.
    """

    parser: DocumentParser
    active_rules: ActiveRuleSet
    max_passes: int = DEFAULT_MAX_PASSES
    executor: Executor | None = None
    cancel: CancellationToken | None = None

    def __post_init__(self) -> None:
        if self.max_passes < 1:
            raise ValueError("max_passes must be at least 1")

    def check(self, text: str, path: str) -> DiagnosticSet | ParseFailure:
        """Single parse + evaluate; never rewrites the text."""
        outcome = parse_document(self.parser, text, path=path, version=0)
        if isinstance(outcome, ParseFailure):
            return outcome
        return evaluate_tree(outcome, text, self.active_rules, executor=self.executor)

    def run(self, text: str, path: str) -> FixRunResult:
        run = _RunState(text=text)
        state = FixState.PARSING
        while not state.is_terminal:
            run.trace.append(state)
            state = self._step(state, run, path)
        run.trace.append(state)
        logger.debug("fix run for %s finished as %s after %d applied passes", path, state, run.applied_passes)
        return self._finish(state, run, source_text=text, path=path)

    def _step(self, state: FixState, run: _RunState, path: str) -> FixState:
        if state is FixState.PARSING:
            if self.cancel is not None and self.cancel.is_set():
                return FixState.CANCELLED
            outcome = parse_document(self.parser, run.text, path=path, version=run.version)
            if isinstance(outcome, ParseFailure):
                run.failure = outcome
                return FixState.FAILED
            run.tree = outcome
            return FixState.EVALUATING

        if state is FixState.EVALUATING:
            assert run.tree is not None
            run.evaluation = evaluate_tree(run.tree, run.text, self.active_rules, executor=self.executor)
            run.patch = None
            if not run.evaluation.fixable:
                run.passes.append(_record(run.evaluation, None, applied=False))
                return FixState.CONVERGED
            return FixState.COMPOSING

        if state is FixState.COMPOSING:
            assert run.evaluation is not None
            run.patch = compose(run.evaluation, source_length=len(run.text))
            if run.patch.is_empty:
                run.passes.append(_record(run.evaluation, run.patch, applied=False))
                return FixState.CONVERGED
            if run.applied_passes >= self.max_passes:
                run.passes.append(_record(run.evaluation, run.patch, applied=False))
                return FixState.CAPPED
            return FixState.APPLYING

        if state is FixState.APPLYING:
            assert run.evaluation is not None and run.patch is not None
            run.text = apply_patch(run.text, run.patch.edits)
            run.version += 1
            run.applied_passes += 1
            run.applied.extend(run.patch.accepted)
            run.passes.append(_record(run.evaluation, run.patch, applied=True))
            logger.debug(
                "%s: applied %d edits, now at v%d",
                path,
                len(run.patch.edits),
                run.version,
            )
            return FixState.RETRYING

        if state is FixState.RETRYING:
            run.tree = None
            return FixState.PARSING

        raise ValueError(f"No transition out of terminal state `{state}`")

    def _finish(self, state: FixState, run: _RunState, *, source_text: str, path: str) -> FixRunResult:
        outcome = _TERMINAL_OUTCOMES[state]
        rejected: tuple[Diagnostic, ...] = ()
        if outcome is FixOutcome.FAILED:
            assert run.failure is not None
            diagnostics: tuple[Diagnostic, ...] = (run.failure.to_diagnostic(),)
        elif run.evaluation is None:
            diagnostics = ()
        elif run.evaluation.version != run.version:
            # Cancelled after applying a pass: report what that pass left unfixed.
            # Spans refer to the evaluated version, so stale fixes are stripped.
            assert run.patch is not None
            applied = {diagnostic.identity for diagnostic in run.patch.accepted}
            diagnostics = tuple(
                replace(diagnostic, fix=None)
                for diagnostic in _reported(run.evaluation, run.patch)
                if diagnostic.identity not in applied
            )
            rejected = run.patch.rejected
        else:
            diagnostics = _reported(run.evaluation, run.patch)
            if run.patch is not None and outcome is not FixOutcome.CANCELLED:
                rejected = run.patch.rejected

        if outcome is FixOutcome.CAPPED:
            logger.warning(
                "%s: fixes did not converge within %d passes; %d diagnostics remain",
                path,
                self.max_passes,
                len(diagnostics),
            )

        return FixRunResult(
            path=path,
            source_text=source_text,
            final_text=run.text,
            version=run.version,
            diagnostics=diagnostics,
            pass_count=max(1, run.applied_passes),
            outcome=outcome,
            applied=tuple(run.applied),
            rejected=rejected,
            passes=tuple(run.passes),
            trace=tuple(run.trace),
            parse_failure=run.failure,
        )


def _record(evaluation: DiagnosticSet, patch: PatchResult | None, *, applied: bool) -> PassRecord:
    return PassRecord(
        version=evaluation.version,
        diagnostics=len(evaluation),
        accepted=len(patch.accepted) if patch is not None else 0,
        rejected=len(patch.rejected) if patch is not None else 0,
        malformed=len(patch.malformed) if patch is not None else 0,
        applied=applied,
    )


def _reported(evaluation: DiagnosticSet, patch: PatchResult | None) -> tuple[Diagnostic, ...]:
    """Evaluation output with unusable fixes stripped, nothing dropped."""
    if patch is None or not patch.malformed:
        return evaluation.diagnostics
    malformed = {diagnostic.identity for diagnostic in patch.malformed}
    return tuple(
        replace(diagnostic, fix=None) if diagnostic.identity in malformed else diagnostic
        for diagnostic in evaluation.diagnostics
    )
