"""Text spans."""

from conformlint.text.span import Span, slice_span

__all__ = ["Span", "slice_span"]
