"""Tree model shared by every document grammar."""

from conformlint.tree.model import (
    SUPPRESSION_ATTRIBUTE,
    AttributeScalar,
    AttributeValue,
    Node,
    Tree,
)
from conformlint.tree.parser import (
    DocumentParser,
    ParseFailure,
    ParseOutcome,
    SuffixDispatchParser,
)
from conformlint.tree.validate import parse_document, validate_tree

__all__ = [
    "SUPPRESSION_ATTRIBUTE",
    "AttributeScalar",
    "AttributeValue",
    "DocumentParser",
    "Node",
    "ParseFailure",
    "ParseOutcome",
    "SuffixDispatchParser",
    "Tree",
    "parse_document",
    "validate_tree",
]
