"""Reference grammar: `key = value` documents with `{ ... }` blocks.

    # conformlint: ignore[STYLE_OPERATOR_SPACING]
    server = {
        host="localhost"   # conformlint: ignore
        ports = { 80 443 }
    }

Node kinds are `document`, `field`, `key`, `scalar` and `block`. A
`# conformlint: ignore[...]` comment trailing a statement on the same line
suppresses rules for that statement; on its own line it suppresses them for
the innermost enclosing block or the whole document.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum

from conformlint.text import Span
from conformlint.tree import SUPPRESSION_ATTRIBUTE, AttributeValue, Node, ParseFailure, Tree

_OPERATORS = ("==", "!=", "<=", ">=", "?=", "=", "<", ">")
_WORD_STOP = frozenset(' \t\r\n{}=<>;,#"')
_SUPPRESSION_PATTERN = re.compile(r"^#\s*conformlint:\s*ignore(?:\[(?P<ids>[^\]]*)\])?\s*$")
MAX_NESTING_DEPTH = 128


class TokenKind(IntEnum):
    EOF = 1

    WHITESPACE = 10
    NEWLINE = 11
    COMMENT = 12

    WORD = 20
    STRING = 21

    OPERATOR = 30
    SEPARATOR = 40  # ; or ,

    LBRACE = 60
    RBRACE = 61


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    span: Span
    text: str


class BlockSyntaxError(Exception):
    def __init__(self, message: str, span: Span) -> None:
        super().__init__(message)
        self.span = span


class BlockLexer:
    """Lossless lexer; every byte of the source lands in exactly one token."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._position = 0

    def lex(self) -> list[Token]:
        tokens: list[Token] = []
        while self._position < len(self._source):
            start = self._position
            kind = self._lex_token()
            tokens.append(Token(kind, Span(start, self._position), self._source[start : self._position]))
        tokens.append(Token(TokenKind.EOF, Span.empty(self._position), ""))
        return tokens

    def _lex_token(self) -> TokenKind:
        ch = self._source[self._position]

        if ch == "\n" or ch == "\r":
            if self._source.startswith("\r\n", self._position):
                self._position += 2
            else:
                self._position += 1
            return TokenKind.NEWLINE

        if ch == " " or ch == "\t":
            while self._position < len(self._source) and self._source[self._position] in " \t":
                self._position += 1
            return TokenKind.WHITESPACE

        if ch == "#":
            end = self._line_end()
            self._position = end
            return TokenKind.COMMENT

        if ch == '"':
            return self._lex_string()

        if ch == "{":
            self._position += 1
            return TokenKind.LBRACE
        if ch == "}":
            self._position += 1
            return TokenKind.RBRACE
        if ch == ";" or ch == ",":
            self._position += 1
            return TokenKind.SEPARATOR

        for operator in _OPERATORS:
            if self._source.startswith(operator, self._position):
                self._position += len(operator)
                return TokenKind.OPERATOR

        return self._lex_word()

    def _lex_string(self) -> TokenKind:
        start = self._position
        self._position += 1
        while self._position < len(self._source):
            ch = self._source[self._position]
            if ch == "\\":
                self._position += 2
                continue
            if ch == "\n" or ch == "\r":
                break
            self._position += 1
            if ch == '"':
                return TokenKind.STRING
        raise BlockSyntaxError("Unterminated string literal", Span(start, min(self._position, len(self._source))))

    def _lex_word(self) -> TokenKind:
        while self._position < len(self._source):
            ch = self._source[self._position]
            if ch in _WORD_STOP:
                break
            if self._source.startswith(("!=", "?="), self._position):
                break
            self._position += 1
        return TokenKind.WORD

    def _line_end(self) -> int:
        index = self._position
        while index < len(self._source) and self._source[index] not in "\r\n":
            index += 1
        return index


class BlockDocumentParser:
    """Parser for block documents, satisfying the engine's parser contract."""

    def parse(self, text: str, *, path: str, version: int) -> Tree | ParseFailure:
        try:
            tokens = BlockLexer(text).lex()
            root = _Parser(text, tokens).parse_document()
        except BlockSyntaxError as exc:
            return ParseFailure(span=exc.span, message=str(exc), path=path, version=version)
        return Tree(root=root, path=path, version=version, source_length=len(text))


class _Parser:
    def __init__(self, source: str, tokens: list[Token]) -> None:
        self._source = source
        self._tokens = tokens
        self._position = 0
        self._depth = 0

    def parse_document(self) -> Node:
        statements, suppression = self._parse_statements(opening=None)
        return Node(
            kind="document",
            span=Span.up_to(len(self._source)),
            children=tuple(statements),
            attributes=_with_suppression({}, suppression),
        )

    def _current(self) -> Token:
        return self._tokens[self._position]

    def _bump(self) -> Token:
        token = self._tokens[self._position]
        if token.kind != TokenKind.EOF:
            self._position += 1
        return token

    def _next_significant(self) -> int:
        index = self._position
        while self._tokens[index].kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE, TokenKind.COMMENT):
            index += 1
        return index

    def _parse_statements(self, opening: Token | None) -> tuple[list[Node], tuple[str, ...] | None]:
        statements: list[Node] = []
        container_suppression: tuple[str, ...] | None = None
        line_break_since_statement = True

        while True:
            token = self._current()
            kind = token.kind

            if kind == TokenKind.WHITESPACE or kind == TokenKind.SEPARATOR:
                self._bump()
                continue
            if kind == TokenKind.NEWLINE:
                line_break_since_statement = True
                self._bump()
                continue
            if kind == TokenKind.COMMENT:
                rule_ids = parse_suppression(token.text)
                if rule_ids is not None:
                    if statements and not line_break_since_statement:
                        statements[-1] = _suppress(statements[-1], rule_ids)
                    else:
                        container_suppression = _merge_suppression(container_suppression, rule_ids)
                self._bump()
                continue
            if kind == TokenKind.EOF:
                if opening is not None:
                    raise BlockSyntaxError("Missing closing brace", opening.span)
                return statements, container_suppression
            if kind == TokenKind.RBRACE:
                if opening is None:
                    raise BlockSyntaxError("Unexpected closing brace", token.span)
                return statements, container_suppression
            if kind == TokenKind.OPERATOR:
                raise BlockSyntaxError(f"Operator `{token.text}` without a key", token.span)

            statements.append(self._parse_statement())
            line_break_since_statement = False

    def _parse_statement(self) -> Node:
        if self._current().kind == TokenKind.LBRACE:
            return self._parse_block()

        key_token = self._bump()
        lookahead = self._tokens[self._next_significant()]

        if lookahead.kind == TokenKind.OPERATOR:
            self._position = self._next_significant()
            operator = self._bump()
            value_index = self._next_significant()
            if self._tokens[value_index].kind not in (TokenKind.WORD, TokenKind.STRING, TokenKind.LBRACE):
                raise BlockSyntaxError("Expected a value", Span.empty(operator.span.end))
            self._position = value_index
            return self._finish_field(key_token, operator, self._parse_value())

        if lookahead.kind == TokenKind.LBRACE:
            self._position = self._next_significant()
            return self._finish_field(key_token, None, self._parse_block())

        return _scalar(key_token)

    def _parse_value(self) -> Node:
        if self._current().kind == TokenKind.LBRACE:
            return self._parse_block()
        return _scalar(self._bump())

    def _parse_block(self) -> Node:
        opening = self._bump()
        if self._depth >= MAX_NESTING_DEPTH:
            raise BlockSyntaxError(f"Blocks nested deeper than {MAX_NESTING_DEPTH} levels", opening.span)
        self._depth += 1
        statements, suppression = self._parse_statements(opening=opening)
        self._depth -= 1
        closing = self._bump()
        span = Span(opening.span.start, closing.span.end)
        keys = tuple(str(child.attributes["key"]) for child in statements if child.kind == "field")
        attributes: dict[str, AttributeValue] = {
            "multiline": "\n" in self._source[span.start : span.end],
            "keys": keys,
        }
        return Node(
            kind="block",
            span=span,
            children=tuple(statements),
            attributes=_with_suppression(attributes, suppression),
        )

    def _finish_field(self, key_token: Token, operator: Token | None, value: Node) -> Node:
        key = _unquote(key_token.text)
        key_node = Node(
            kind="key",
            span=key_token.span,
            attributes={"text": key, "quoted": key_token.kind == TokenKind.STRING},
        )
        attributes: dict[str, AttributeValue] = {
            "key": key,
            "operator": operator.text if operator is not None else None,
            "operator_span": operator.span.as_tuple() if operator is not None else None,
            "value_kind": value.kind,
            "value": value.attributes.get("value"),
            "quoted": bool(value.attributes.get("quoted", False)),
            "line": self._source.count("\n", 0, key_token.span.start) + 1,
        }
        return Node(
            kind="field",
            span=Span(key_token.span.start, value.span.end),
            children=(key_node, value),
            attributes=attributes,
        )


def parse_suppression(comment: str) -> tuple[str, ...] | None:
    """Rule ids named by a suppression comment; () silences every rule."""
    match = _SUPPRESSION_PATTERN.match(comment.strip())
    if match is None:
        return None
    raw_ids = match.group("ids")
    if raw_ids is None:
        return ()
    return tuple(sorted({rule_id.strip() for rule_id in raw_ids.split(",") if rule_id.strip()}))


def _scalar(token: Token) -> Node:
    return Node(
        kind="scalar",
        span=token.span,
        attributes={
            "raw": token.text,
            "value": _unquote(token.text),
            "quoted": token.kind == TokenKind.STRING,
        },
    )


def _unquote(text: str) -> str:
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return text


def _merge_suppression(existing: tuple[str, ...] | None, added: tuple[str, ...]) -> tuple[str, ...]:
    if existing is None:
        return added
    if not existing or not added:
        return ()
    return tuple(sorted(set(existing) | set(added)))


def _with_suppression(
    attributes: Mapping[str, AttributeValue],
    suppression: tuple[str, ...] | None,
) -> dict[str, AttributeValue]:
    merged = dict(attributes)
    if suppression is not None:
        merged[SUPPRESSION_ATTRIBUTE] = suppression
    return merged


def _suppress(node: Node, rule_ids: tuple[str, ...]) -> Node:
    current = node.suppressed_rules
    existing = None if current is None else tuple(sorted(current))
    return Node(
        kind=node.kind,
        span=node.span,
        children=node.children,
        attributes=_with_suppression(node.attributes, _merge_suppression(existing, rule_ids)),
    )
