"""Registry of known rules keyed by id."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from conformlint.diagnostics import RESERVED_RULE_PREFIX, SEVERITIES
from conformlint.rules.base import Rule

_RULE_ID_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_.\-/]*$")
_ALLOWED_CATEGORIES = {"schema", "style", "correctness", "suspicious"}


class RuleRegistry:
    """Holds every rule the engine may run; configuration selects among them."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        validate_rule(rule)
        if rule.id in self._rules:
            raise ValueError(f"Rule id `{rule.id}` is already registered")
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        for rule_id in sorted(self._rules):
            yield self._rules[rule_id]

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._rules))


def validate_rule(rule: Rule) -> None:
    if not _RULE_ID_PATTERN.match(rule.id):
        raise ValueError(f"Rule `{rule.name}` has invalid id `{rule.id}`.")
    if rule.id.startswith(RESERVED_RULE_PREFIX):
        raise ValueError(
            f"Rule `{rule.name}` has invalid id `{rule.id}`; the `{RESERVED_RULE_PREFIX}` prefix is reserved."
        )
    if rule.category not in _ALLOWED_CATEGORIES:
        raise ValueError(
            f"Rule `{rule.name}` has invalid category `{rule.category}`; "
            f"expected one of {', '.join(sorted(_ALLOWED_CATEGORIES))}."
        )
    if rule.default_severity not in SEVERITIES:
        raise ValueError(
            f"Rule `{rule.name}` has invalid default severity `{rule.default_severity}`; expected error/warning/info."
        )
    if not isinstance(getattr(rule, "default_enabled", None), bool):
        raise ValueError(f"Rule `{rule.name}` must declare `default_enabled` as a bool.")
