"""Single span-replacement edits."""

from __future__ import annotations

from dataclasses import dataclass

from conformlint.text import Span


@dataclass(frozen=True, slots=True)
class Edit:
    """Replace `span` of the pre-edit source with `replacement`."""

    span: Span
    replacement: str

    @staticmethod
    def insert(offset: int, text: str) -> Edit:
        return Edit(Span.empty(offset), text)

    @staticmethod
    def delete(span: Span) -> Edit:
        return Edit(span, "")

    @staticmethod
    def replace(span: Span, text: str) -> Edit:
        return Edit(span, text)

    @property
    def length_delta(self) -> int:
        return len(self.replacement) - self.span.length()
