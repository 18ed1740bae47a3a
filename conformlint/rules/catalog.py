"""Table-driven rule templates expressed purely over node kinds and attributes."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

from conformlint.diagnostics import Diagnostic, Edit, Severity
from conformlint.rules.base import Rule, RuleOptions
from conformlint.text import Span, slice_span
from conformlint.tree import Node, Tree

type KeyCase = Literal["snake", "camel", "pascal", "kebab"]

_KEY_CASES: tuple[KeyCase, ...] = ("snake", "camel", "pascal", "kebab")
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)$")
_BOOL_VALUES = frozenset({"yes", "no", "true", "false"})


@dataclass(frozen=True, slots=True)
class FieldConstraint:
    """Constraint on a scalar field value (enum, format and range)."""

    allowed: tuple[str, ...] | None = None
    pattern: str | None = None
    value_type: Literal["int", "float", "bool", "string"] | None = None
    minimum: float | None = None
    maximum: float | None = None

    @staticmethod
    def from_options(name: str, raw: Mapping[str, Any]) -> FieldConstraint:
        unknown = set(raw) - {"allowed", "pattern", "type", "min", "max"}
        if unknown:
            raise ValueError(f"constraint for `{name}` has unknown keys: {', '.join(sorted(unknown))}")
        allowed = raw.get("allowed")
        if allowed is not None and (isinstance(allowed, str) or not isinstance(allowed, Sequence)):
            raise ValueError(f"`{name}.allowed` must be a list of strings")
        pattern = raw.get("pattern")
        if pattern is not None:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"`{name}.pattern` is not a valid regular expression: {exc}") from exc
        value_type = raw.get("type")
        if value_type is not None and value_type not in ("int", "float", "bool", "string"):
            raise ValueError(f"`{name}.type` must be one of int/float/bool/string")
        minimum = raw.get("min")
        maximum = raw.get("max")
        for bound in (minimum, maximum):
            if bound is not None and (isinstance(bound, bool) or not isinstance(bound, (int, float))):
                raise ValueError(f"`{name}` bounds must be numbers")
        return FieldConstraint(
            allowed=tuple(str(value) for value in allowed) if allowed is not None else None,
            pattern=pattern,
            value_type=value_type,
            minimum=float(minimum) if minimum is not None else None,
            maximum=float(maximum) if maximum is not None else None,
        )

    def violation(self, value: str) -> str | None:
        """Describe why `value` breaks the constraint, or None when it holds."""
        if self.allowed is not None and value not in self.allowed:
            return f"expected one of {', '.join(self.allowed)}"
        if self.pattern is not None and re.fullmatch(self.pattern, value) is None:
            return f"expected format `{self.pattern}`"
        if self.value_type == "int" and not _INT_PATTERN.match(value):
            return "expected an integer"
        if self.value_type == "float" and not _FLOAT_PATTERN.match(value):
            return "expected a number"
        if self.value_type == "bool" and value.lower() not in _BOOL_VALUES:
            return "expected a boolean"
        if self.minimum is not None or self.maximum is not None:
            if not _FLOAT_PATTERN.match(value):
                return "expected a number"
            number = float(value)
            if self.minimum is not None and number < self.minimum:
                return f"expected at least {_format_number(self.minimum)}"
            if self.maximum is not None and number > self.maximum:
                return f"expected at most {_format_number(self.maximum)}"
        return None


@dataclass(frozen=True, slots=True)
class RequiredFieldRule:
    """Object blocks must define their required fields; the fix inserts a default."""

    id: str = "SCHEMA_REQUIRED_FIELD"
    name: str = "schemaRequiredField"
    category: str = "schema"
    default_severity: Severity = "error"
    can_fix: bool = True
    default_enabled: bool = True
    required_fields_by_key: Mapping[str, Mapping[str, str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def validate_options(self, options: RuleOptions) -> None:
        _reject_unknown(options, {"required"})
        required = options.get("required", {})
        if not isinstance(required, Mapping):
            raise ValueError("`required` must map object keys to {field: default} tables")
        for object_key, fields in required.items():
            if not isinstance(fields, Mapping) or not all(
                isinstance(name, str) and isinstance(default, str) for name, default in fields.items()
            ):
                raise ValueError(f"`required.{object_key}` must map field names to default value text")

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        table = {**self.required_fields_by_key, **options.get("required", {})}
        diagnostics: list[Diagnostic] = []
        for node in tree.find("field"):
            key = str(node.attribute("key"))
            required = table.get(key)
            if not required:
                continue
            block = node.child_of_kind("block")
            if block is None:
                continue
            present = set(block.attribute("keys") or ())
            key_span = node.children[0].span
            for field_name, default in required.items():
                if field_name in present:
                    continue
                diagnostics.append(
                    Diagnostic(
                        rule_id=self.id,
                        message=f"Object `{key}` is missing required field `{field_name}`.",
                        span=key_span,
                        severity=self.default_severity,
                        fix=(_insert_field(source, block, f"{field_name} = {default}"),),
                        hint=f"Add `{field_name} = ...` to `{key}`.",
                        category=self.category,
                    )
                )
        return diagnostics


@dataclass(frozen=True, slots=True)
class AllowedValuesRule:
    """Scalar field values must satisfy enum, format and range constraints."""

    id: str = "SCHEMA_FIELD_VALUE"
    name: str = "schemaFieldValue"
    category: str = "schema"
    default_severity: Severity = "error"
    can_fix: bool = False
    default_enabled: bool = True
    constraints: Mapping[str, FieldConstraint] = field(default_factory=lambda: MappingProxyType({}))

    def validate_options(self, options: RuleOptions) -> None:
        _reject_unknown(options, {"fields"})
        self._constraints(options)

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        constraints = self._constraints(options)
        diagnostics: list[Diagnostic] = []
        for node in tree.find("field"):
            constraint = constraints.get(str(node.attribute("key")))
            if constraint is None or node.attribute("value_kind") != "scalar":
                continue
            value = str(node.attribute("value"))
            reason = constraint.violation(value)
            if reason is None:
                continue
            diagnostics.append(
                Diagnostic(
                    rule_id=self.id,
                    message=f"Field `{node.attribute('key')}` has invalid value `{value}`: {reason}.",
                    span=node.children[-1].span,
                    severity=self.default_severity,
                    category=self.category,
                )
            )
        return diagnostics

    def _constraints(self, options: RuleOptions) -> Mapping[str, FieldConstraint]:
        raw_fields = options.get("fields", {})
        if not isinstance(raw_fields, Mapping):
            raise ValueError("`fields` must map field names to constraints")
        merged = dict(self.constraints)
        for name, raw in raw_fields.items():
            if not isinstance(raw, Mapping):
                raise ValueError(f"constraint for `{name}` must be a mapping")
            merged[str(name)] = FieldConstraint.from_options(str(name), raw)
        return merged


@dataclass(frozen=True, slots=True)
class KeyCaseRule:
    """Field keys follow one naming case; the fix rewrites the key."""

    id: str = "SCHEMA_KEY_CASE"
    name: str = "schemaKeyCase"
    category: str = "schema"
    default_severity: Severity = "warning"
    can_fix: bool = True
    default_enabled: bool = True
    case: KeyCase = "snake"
    ignore: frozenset[str] = frozenset()

    def validate_options(self, options: RuleOptions) -> None:
        _reject_unknown(options, {"case", "ignore"})
        if "case" in options and options["case"] not in _KEY_CASES:
            raise ValueError(f"`case` must be one of {', '.join(_KEY_CASES)}")
        ignore = options.get("ignore", ())
        if isinstance(ignore, str) or not isinstance(ignore, Sequence):
            raise ValueError("`ignore` must be a list of keys")

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        case: KeyCase = options.get("case", self.case)
        ignore = self.ignore | frozenset(options.get("ignore", ()))
        diagnostics: list[Diagnostic] = []
        for node in tree.find("field"):
            key_node = node.children[0]
            key = str(key_node.attribute("text"))
            if key in ignore:
                continue
            expected = convert_case(key, case)
            if not expected or expected == key:
                continue
            fix: tuple[Edit, ...] | None = None
            if _keeps_letters(key, expected):
                replacement = f'"{expected}"' if key_node.attribute("quoted") else expected
                fix = (Edit.replace(key_node.span, replacement),)
            diagnostics.append(
                Diagnostic(
                    rule_id=self.id,
                    message=f"Key `{key}` should be {case} case: `{expected}`.",
                    span=key_node.span,
                    severity=self.default_severity,
                    fix=fix,
                    hint=None if fix else "Lowercasing changes this key's letters; rename it by hand.",
                    category=self.category,
                )
            )
        return diagnostics


@dataclass(frozen=True, slots=True)
class OperatorSpacingRule:
    """Exactly one space on each side of an assignment operator."""

    id: str = "STYLE_OPERATOR_SPACING"
    name: str = "styleOperatorSpacing"
    category: str = "style"
    default_severity: Severity = "warning"
    can_fix: bool = True
    default_enabled: bool = True

    def validate_options(self, options: RuleOptions) -> None:
        _reject_unknown(options, set())

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for node in tree.find("field"):
            operator = node.attribute("operator")
            operator_span = node.attribute("operator_span")
            if operator is None or not isinstance(operator_span, tuple):
                continue
            gap = Span(node.children[0].span.end, node.children[-1].span.start)
            current = slice_span(source, gap)
            expected = f" {operator} "
            if current == expected or "\n" in current or "#" in current:
                continue
            diagnostics.append(
                Diagnostic(
                    rule_id=self.id,
                    message=f"Expected single spaces around `{operator}`.",
                    span=Span(*operator_span),
                    severity=self.default_severity,
                    fix=(Edit.replace(gap, expected),),
                    category=self.category,
                )
            )
        return diagnostics


@dataclass(frozen=True, slots=True)
class SingleLineBlockRule:
    """Flags `{ ... }` blocks holding several values on one line."""

    id: str = "STYLE_SINGLE_LINE_BLOCK"
    name: str = "styleSingleLineBlock"
    category: str = "style"
    default_severity: Severity = "info"
    can_fix: bool = False
    default_enabled: bool = True
    max_items: int = 1

    def validate_options(self, options: RuleOptions) -> None:
        _reject_unknown(options, {"max_items"})
        max_items = options.get("max_items", self.max_items)
        if isinstance(max_items, bool) or not isinstance(max_items, int) or max_items < 1:
            raise ValueError("`max_items` must be a positive integer")

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        max_items = options.get("max_items", self.max_items)
        return [
            Diagnostic(
                rule_id=self.id,
                message=f"Blocks with more than {max_items} value(s) should be split across lines.",
                span=node.span,
                severity=self.default_severity,
                hint="Use multiline layout inside braces when multiple values are present.",
                category=self.category,
            )
            for node in tree.find("block")
            if not node.attribute("multiline") and len(node.children) > max_items
        ]


def builtin_rules() -> tuple[Rule, ...]:
    rules: list[Rule] = [
        RequiredFieldRule(),
        AllowedValuesRule(),
        KeyCaseRule(),
        OperatorSpacingRule(),
        SingleLineBlockRule(),
    ]
    return tuple(sorted(rules, key=lambda rule: (rule.category, rule.id)))


def convert_case(key: str, case: KeyCase) -> str:
    """Rewrite `key` in the given case, keeping any leading `_`/`@` prefix.

    Words split on separators and on case changes, for any script:
    `HTTPServer` gives `http`/`server`, `großeStraße` gives `große`/`straße`.
    """
    prefix_length = 0
    while prefix_length < len(key) and not key[prefix_length].isalnum():
        prefix_length += 1
    prefix = key[:prefix_length]
    words = [word.lower() for word in _split_words(key[prefix_length:])]
    if not words:
        return ""
    if case == "snake":
        return prefix + "_".join(words)
    if case == "kebab":
        return prefix + "-".join(words)
    if case == "camel":
        return prefix + words[0] + "".join(word.capitalize() for word in words[1:])
    return prefix + "".join(word.capitalize() for word in words)


def _split_words(text: str) -> list[str]:
    """Split `text` into words; every alphanumeric character lands in one."""
    words: list[str] = []
    current = ""
    for index, char in enumerate(text):
        if not char.isalnum():
            if current:
                words.append(current)
            current = ""
            continue
        if current and _starts_word(current, char, text[index + 1 : index + 2]):
            words.append(current)
            current = ""
        current += char
    if current:
        words.append(current)
    return words


def _starts_word(current: str, char: str, following: str) -> bool:
    previous = current[-1]
    if char.isdigit():
        return False
    if char.isupper():
        # An acronym ends where a capitalised word begins: HTTP|Server.
        return not previous.isupper() or following.islower()
    if previous.isdigit():
        # Digits glue onto a lowercase word (ipv4address) but close an acronym or a number.
        letters = [c for c in current if c.isalpha()]
        return not letters or all(c.isupper() for c in letters)
    return False


def _keeps_letters(key: str, expected: str) -> bool:
    """True when the rewrite changes only case and separators of `key`."""
    original = "".join(char for char in key if char.isalnum())
    rewritten = "".join(char for char in expected if char.isalnum())
    return original.casefold() == rewritten.casefold()


def _insert_field(source: str, block: Node, entry: str) -> Edit:
    closing = block.span.end - 1
    if not block.attribute("multiline"):
        if source[closing - 1] == "{":
            return Edit.insert(closing, f" {entry} ")
        if source[closing - 1] in " \t":
            return Edit.insert(closing, f"{entry} ")
        return Edit.insert(closing, f" {entry} ")

    line_start = source.rfind("\n", 0, closing) + 1
    closing_indent = source[line_start:closing]
    if closing_indent.strip():
        return Edit.insert(closing, f" {entry} ")
    return Edit.insert(line_start, f"{_child_indent(source, block, closing_indent)}{entry}\n")


def _child_indent(source: str, block: Node, closing_indent: str) -> str:
    for child in block.children:
        line_start = source.rfind("\n", 0, child.span.start) + 1
        indent = source[line_start : child.span.start]
        if not indent.strip():
            return indent
    return closing_indent + "    "


def _reject_unknown(options: RuleOptions, allowed: set[str]) -> None:
    unknown = set(options) - allowed
    if unknown:
        raise ValueError(f"unknown options: {', '.join(sorted(unknown))}")


def _format_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)
