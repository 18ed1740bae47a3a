"""Exception taxonomy for the lint engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from conformlint.diagnostics import Diagnostic


class ConformLintError(Exception):
    """Base class for engine errors."""


class ConfigError(ConformLintError):
    """Configuration references an unknown rule, a bad severity or bad options.

    Fatal for the whole run: no document is evaluated under a broken policy.
    """

    def __init__(self, message: str, *, rule_id: str | None = None) -> None:
        super().__init__(message)
        self.rule_id = rule_id


class FixConflictError(ConformLintError):
    """A rule emitted a fix whose own edits overlap, are unsorted or out of range.

    Fatal to that diagnostic's fix for the current pass only.
    """

    def __init__(self, message: str, *, diagnostic: Diagnostic) -> None:
        super().__init__(message)
        self.diagnostic = diagnostic


class RuleContractError(ConformLintError):
    """A rule returned output that breaks the rule contract."""

    def __init__(self, message: str, *, rule_id: str) -> None:
        super().__init__(message)
        self.rule_id = rule_id


__all__ = [
    "ConfigError",
    "ConformLintError",
    "FixConflictError",
    "RuleContractError",
]
