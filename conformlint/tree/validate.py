"""Span-nesting checks for parser output."""

from __future__ import annotations

from conformlint.diagnostics import ENGINE_MALFORMED_TREE
from conformlint.text import Span
from conformlint.tree.model import Node, Tree
from conformlint.tree.parser import DocumentParser, ParseFailure


class TreeShapeError(ValueError):
    def __init__(self, message: str, span: Span) -> None:
        super().__init__(message)
        self.span = span


def validate_tree(tree: Tree) -> ParseFailure | None:
    """Return a failure when the tree breaks span nesting, else None."""
    try:
        if tree.root.span.end > tree.source_length:
            raise TreeShapeError(
                f"root `{tree.root.kind}` {tree.root.span!r} exceeds source length {tree.source_length}",
                tree.root.span,
            )
        _check_node(tree.root)
    except TreeShapeError as exc:
        return ParseFailure(
            span=exc.span,
            message=f"{ENGINE_MALFORMED_TREE.message} {exc}",
            path=tree.path,
            version=tree.version,
        )
    return None


def _check_node(root: Node) -> None:
    stack = [root]
    while stack:
        node = stack.pop()
        _check_children(node)
        stack.extend(reversed(node.children))


def _check_children(node: Node) -> None:
    previous: Node | None = None
    for child in node.children:
        if not node.span.contains_span(child.span):
            raise TreeShapeError(
                f"`{child.kind}` {child.span!r} escapes parent `{node.kind}` {node.span!r}",
                child.span,
            )
        if previous is not None and previous.span.ordering(child.span) != -1:
            raise TreeShapeError(
                f"`{child.kind}` {child.span!r} overlaps or precedes sibling `{previous.kind}` {previous.span!r}",
                child.span,
            )
        previous = child


def parse_document(parser: DocumentParser, text: str, *, path: str, version: int) -> Tree | ParseFailure:
    """Parse and check the tree shape; a malformed tree becomes a ParseFailure."""
    outcome = parser.parse(text, path=path, version=version)
    if isinstance(outcome, ParseFailure):
        return outcome
    if outcome.source_length != len(text) or outcome.version != version:
        return ParseFailure(
            span=Span.empty(0),
            message=(
                f"{ENGINE_MALFORMED_TREE.message} Tree reports length {outcome.source_length} "
                f"at v{outcome.version}, expected {len(text)} at v{version}."
            ),
            path=path,
            version=version,
        )
    failure = validate_tree(outcome)
    if failure is not None:
        return failure
    return outcome
