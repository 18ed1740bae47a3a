"""Pipeline run result carriers for tool entrypoints."""

from __future__ import annotations

from dataclasses import dataclass

from conformlint.diagnostics import Diagnostic, has_errors
from conformlint.fix import FixRunResult
from conformlint.tree import ParseFailure


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """One document handed to a batch run, text supplied in full."""

    path: str
    text: str


@dataclass(frozen=True, slots=True)
class CheckRunResult:
    """Result of one check-only pass."""

    path: str
    source_text: str
    diagnostics: tuple[Diagnostic, ...]
    version: int = 0
    suppressed: int = 0
    skipped: bool = False
    cancelled: bool = False
    parse_failure: ParseFailure | None = None

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)

    @property
    def fixable(self) -> tuple[Diagnostic, ...]:
        return tuple(diagnostic for diagnostic in self.diagnostics if diagnostic.is_fixable)


@dataclass(frozen=True, slots=True)
class DocumentResult:
    """Per-document outcome of a batch run; exactly one of check/fix is set."""

    document: SourceDocument
    check: CheckRunResult | None = None
    fix: FixRunResult | None = None

    def __post_init__(self) -> None:
        if (self.check is None) == (self.fix is None):
            raise ValueError("DocumentResult needs exactly one of check or fix")

    @property
    def path(self) -> str:
        return self.document.path

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        if self.fix is not None:
            return self.fix.diagnostics
        assert self.check is not None
        return self.check.diagnostics

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)


__all__ = [
    "CheckRunResult",
    "DocumentResult",
    "FixRunResult",
    "SourceDocument",
]
