"""Immutable structural tree produced by a document parser."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from conformlint.text import Span

type AttributeScalar = str | int | float | bool | None
type AttributeValue = AttributeScalar | tuple[AttributeValue, ...] | Mapping[str, AttributeValue]

SUPPRESSION_ATTRIBUTE = "suppress"


def _empty_attributes() -> Mapping[str, AttributeValue]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Node:
    """One structural unit of a parsed document.

    `kind` is a grammar tag such as "class-declaration" or "schema-property";
    `attributes` hold whatever semantic facts the parser extracted.
    """

    kind: str
    span: Span
    children: tuple[Node, ...] = ()
    attributes: Mapping[str, AttributeValue] = field(default_factory=_empty_attributes)

    def __post_init__(self) -> None:
        if not isinstance(self.attributes, MappingProxyType):
            object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def attribute(self, name: str, default: AttributeValue = None) -> AttributeValue:
        return self.attributes.get(name, default)

    def walk(self) -> Iterator[Node]:
        """Pre-order traversal, source order among siblings."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, kind: str) -> Iterator[Node]:
        return (node for node in self.walk() if node.kind == kind)

    def child_of_kind(self, kind: str) -> Node | None:
        for child in self.children:
            if child.kind == kind:
                return child
        return None

    @property
    def suppressed_rules(self) -> frozenset[str] | None:
        """Rule ids silenced over this node's span.

        None when the node carries no suppression; an empty set means every
        rule is silenced.
        """
        if SUPPRESSION_ATTRIBUTE not in self.attributes:
            return None
        value = self.attributes[SUPPRESSION_ATTRIBUTE]
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset((value,))
        if isinstance(value, tuple):
            return frozenset(str(item) for item in value)
        raise ValueError(f"Unsupported `{SUPPRESSION_ATTRIBUTE}` attribute on `{self.kind}` node: {value!r}")


@dataclass(frozen=True, slots=True)
class Tree:
    """Rooted node graph computed from one version of one document."""

    root: Node
    path: str
    version: int
    source_length: int

    def walk(self) -> Iterator[Node]:
        return self.root.walk()

    def find(self, kind: str) -> Iterator[Node]:
        return self.root.find(kind)
