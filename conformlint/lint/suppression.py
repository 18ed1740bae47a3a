"""Suppression regions surfaced by the parser as node attributes."""

from __future__ import annotations

from dataclasses import dataclass

from conformlint.diagnostics import Diagnostic
from conformlint.text import Span
from conformlint.tree import Tree


@dataclass(frozen=True, slots=True)
class Suppression:
    """Silences `rule_ids` (or every rule when empty) over a node's full span."""

    span: Span
    rule_ids: frozenset[str]

    def covers(self, diagnostic: Diagnostic) -> bool:
        if not self.span.contains_span(diagnostic.span):
            return False
        return not self.rule_ids or diagnostic.rule_id in self.rule_ids


@dataclass(frozen=True, slots=True)
class SuppressionIndex:
    suppressions: tuple[Suppression, ...]

    @staticmethod
    def from_tree(tree: Tree) -> SuppressionIndex:
        suppressions: list[Suppression] = []
        for node in tree.walk():
            rule_ids = node.suppressed_rules
            if rule_ids is None:
                continue
            suppressions.append(Suppression(span=node.span, rule_ids=rule_ids))
        return SuppressionIndex(tuple(suppressions))

    def is_suppressed(self, diagnostic: Diagnostic) -> bool:
        return any(suppression.covers(diagnostic) for suppression in self.suppressions)
