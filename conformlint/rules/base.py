"""Rule contract."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from conformlint.diagnostics import Diagnostic, Severity
from conformlint.tree import Tree

type RuleOptions = Mapping[str, Any]


class Rule(Protocol):
    """Unit of policy evaluated against one tree.

    `evaluate` must be a pure function of its inputs: the fix loop relies on
    it to converge and rules may be evaluated concurrently.
    """

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def category(self) -> str: ...

    @property
    def default_severity(self) -> Severity: ...

    @property
    def can_fix(self) -> bool: ...

    @property
    def default_enabled(self) -> bool:
        """Whether the rule runs when no configuration layer mentions it."""
        ...

    def validate_options(self, options: RuleOptions) -> None:
        """Raise ValueError when options are unusable for this rule."""
        ...

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]: ...
