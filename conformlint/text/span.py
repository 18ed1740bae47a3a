from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """
    Half-open range [start, end) into one version of a document's text.

    Invariant:
    - 0 <= start <= end

    Offsets count code points of the Python string, not UTF-8 bytes, so
    slicing with them is exact.
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < 0:
            raise ValueError("Span positions cannot be negative")
        if self.start > self.end:
            raise ValueError("Span invariant violated: start > end")

    @staticmethod
    def empty(offset: int) -> "Span":
        """Create an empty Span at the given offset."""
        return Span(offset, offset)

    @staticmethod
    def up_to(end: int) -> "Span":
        """Create a Span from 0 up to the given end offset."""
        return Span(0, end)

    def length(self) -> int:
        return self.end - self.start

    def is_empty(self) -> bool:
        return self.start == self.end

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def contains_span(self, other: "Span") -> bool:
        """Check if this span fully contains another span."""
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: "Span") -> bool:
        """Check if the spans share at least one offset.

        Empty spans never overlap anything; an insertion point is only a
        conflict when it falls strictly inside a non-empty span.
        """
        if self.is_empty():
            return other.start < self.start < other.end
        if other.is_empty():
            return self.start < other.start < self.end
        return self.start < other.end and other.start < self.end

    def cover(self, other: "Span") -> "Span":
        """Get the minimal span that covers both spans."""
        return Span(min(self.start, other.start), max(self.end, other.end))

    def ordering(self, other: "Span") -> Literal[-1, 0, 1]:
        """Compare this span to another span for ordering.

        Returns:
        - -1 if this span is before the other span
        - 0 if the spans overlap
        - 1 if this span is after the other span
        """
        if self.end <= other.start:
            return -1
        elif other.end <= self.start:
            return 1
        else:
            return 0

    def shift(self, delta: int) -> "Span":
        return Span(self.start + delta, self.end + delta)

    def __repr__(self) -> str:
        return f"Span({self.start}, {self.end})"


def slice_span(source: str, span: Span) -> str:
    """Get the substring of the source text covered by the given Span."""
    return source[span.start : span.end]
