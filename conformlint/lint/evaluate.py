"""Evaluation pass: run every active rule over one immutable tree."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from concurrent.futures import Executor
from dataclasses import dataclass, replace

from conformlint.config import ActiveRule, ActiveRuleSet
from conformlint.diagnostics import Diagnostic, collect_diagnostics, sort_diagnostics
from conformlint.errors import RuleContractError
from conformlint.lint.suppression import SuppressionIndex
from conformlint.tree import Tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiagnosticSet:
    """Sorted, deduplicated diagnostics for one tree version."""

    diagnostics: tuple[Diagnostic, ...]
    version: int
    suppressed: int = 0

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    @property
    def fixable(self) -> tuple[Diagnostic, ...]:
        return tuple(diagnostic for diagnostic in self.diagnostics if diagnostic.is_fixable)


def evaluate_tree(
    tree: Tree,
    source: str,
    active_rules: ActiveRuleSet,
    *,
    executor: Executor | None = None,
) -> DiagnosticSet:
    """Run the enabled rules against `tree`; rules never see each other's output."""
    if len(source) != tree.source_length:
        raise ValueError("Tree was not computed from the provided source text")

    rules = tuple(active_rules)
    if executor is not None and len(rules) > 1:
        batches = list(executor.map(lambda active: _run_rule(active, tree, source), rules))
    else:
        batches = [_run_rule(active, tree, source) for active in rules]

    suppressions = SuppressionIndex.from_tree(tree)
    kept: dict[tuple[str, int, int, str], Diagnostic] = {}
    suppressed = 0
    for diagnostic in sort_diagnostics(collect_diagnostics(*batches)):
        if suppressions.is_suppressed(diagnostic):
            suppressed += 1
            continue
        kept.setdefault(diagnostic.identity, diagnostic)

    diagnostics = tuple(kept.values())
    logger.debug(
        "evaluated %d rules on %s@v%d: %d diagnostics, %d suppressed",
        len(rules),
        tree.path,
        tree.version,
        len(diagnostics),
        suppressed,
    )
    return DiagnosticSet(diagnostics=diagnostics, version=tree.version, suppressed=suppressed)


def _run_rule(active: ActiveRule, tree: Tree, source: str) -> Sequence[Diagnostic]:
    emitted = active.rule.evaluate(tree, source, active.options)
    stamped: list[Diagnostic] = []
    for diagnostic in emitted:
        if diagnostic.rule_id != active.id:
            raise RuleContractError(
                f"Rule `{active.id}` emitted a diagnostic for `{diagnostic.rule_id}`.",
                rule_id=active.id,
            )
        if diagnostic.span.end > tree.source_length:
            raise RuleContractError(
                f"Rule `{active.id}` emitted {diagnostic.span!r} outside a document of length {tree.source_length}.",
                rule_id=active.id,
            )
        stamped.append(replace(diagnostic, severity=active.severity, version=tree.version))
    return stamped
