"""Reference document grammars."""

from conformlint.grammars.blocks import (
    BlockDocumentParser,
    BlockLexer,
    MAX_NESTING_DEPTH,
    BlockSyntaxError,
    Token,
    TokenKind,
    parse_suppression,
)

__all__ = [
    "BlockDocumentParser",
    "BlockLexer",
    "BlockSyntaxError",
    "MAX_NESTING_DEPTH",
    "Token",
    "TokenKind",
    "parse_suppression",
]
