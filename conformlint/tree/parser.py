"""External parser contract and suffix-based dispatch."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Protocol

from conformlint.diagnostics import ENGINE_NO_PARSER, ENGINE_PARSE_FAILURE, Diagnostic
from conformlint.text import Span
from conformlint.tree.model import Tree


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """Document could not be structurally modeled."""

    span: Span
    message: str
    path: str
    version: int = 0

    def to_diagnostic(self) -> Diagnostic:
        """The single synthetic diagnostic reported for an unparsable document."""
        return Diagnostic(
            rule_id=ENGINE_PARSE_FAILURE.code,
            message=self.message,
            span=self.span,
            severity=ENGINE_PARSE_FAILURE.severity,
            version=self.version,
            hint=ENGINE_PARSE_FAILURE.hint,
            category=ENGINE_PARSE_FAILURE.category,
        )


type ParseOutcome = Tree | ParseFailure


class DocumentParser(Protocol):
    """Grammar-specific parser. Must be deterministic."""

    def parse(self, text: str, *, path: str, version: int) -> ParseOutcome: ...


class SuffixDispatchParser:
    """Pick a parser by file suffix so several grammars share one `parse`."""

    def __init__(self, parsers: Mapping[str, DocumentParser]) -> None:
        normalized: dict[str, DocumentParser] = {}
        for suffix, parser in parsers.items():
            key = suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}"
            normalized[key] = parser
        self._parsers = MappingProxyType(normalized)

    @property
    def suffixes(self) -> tuple[str, ...]:
        return tuple(sorted(self._parsers))

    def parse(self, text: str, *, path: str, version: int) -> ParseOutcome:
        suffix = PurePosixPath(path).suffix.lower()
        parser = self._parsers.get(suffix)
        if parser is None:
            return ParseFailure(
                span=Span.empty(0),
                message=f"{ENGINE_NO_PARSER.message} No parser for suffix `{suffix or '<none>'}`.",
                path=path,
                version=version,
            )
        return parser.parse(text, path=path, version=version)
