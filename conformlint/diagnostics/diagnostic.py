"""Diagnostics core types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from conformlint.diagnostics.edit import Edit
from conformlint.text import Span

type Severity = Literal["error", "warning", "info"]

SEVERITIES: Final[tuple[Severity, ...]] = ("error", "warning", "info")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured rule violation, optionally carrying a fix.

    `span` and every edit span in `fix` refer to the source `version`
    the diagnostic was computed against.
    """

    rule_id: str
    message: str
    span: Span
    severity: Severity = "error"
    fix: tuple[Edit, ...] | None = None
    version: int = 0
    hint: str | None = None
    category: str | None = None

    @property
    def is_fixable(self) -> bool:
        return bool(self.fix)

    @property
    def identity(self) -> tuple[str, int, int, str]:
        """Key under which duplicate diagnostics collapse."""
        return (self.rule_id, self.span.start, self.span.end, self.message)

    @property
    def sort_key(self) -> tuple[int, int, str, str]:
        return (self.span.start, self.span.end, self.rule_id, self.message)
