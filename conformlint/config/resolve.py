"""Resolve configuration into the rule set active for one document."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import PurePath
from types import MappingProxyType
from typing import Any

from conformlint.config.model import LintConfig, PathOverride, RuleConfig, normalize_path, parse_severity
from conformlint.diagnostics import Severity
from conformlint.errors import ConfigError
from conformlint.rules import Rule, RuleRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActiveRule:
    """A rule with its severity and options resolved for one path."""

    rule: Rule
    severity: Severity
    options: Mapping[str, Any]

    @property
    def id(self) -> str:
        return self.rule.id


@dataclass(frozen=True, slots=True)
class ActiveRuleSet:
    path: str
    rules: tuple[ActiveRule, ...]
    skipped: bool = False

    def __iter__(self) -> Iterator[ActiveRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(active.id for active in self.rules)

    def get(self, rule_id: str) -> ActiveRule | None:
        for active in self.rules:
            if active.id == rule_id:
                return active
        return None


def validate_config(config: LintConfig, registry: RuleRegistry) -> None:
    """Reject the whole configuration if any entry is unusable."""
    layers: list[tuple[str, Mapping[str, RuleConfig]]] = [("rules", config.rules)]
    for index, override in enumerate(config.overrides):
        layers.append((f"overrides[{index}].rules", override.rules))

    for label, rule_configs in layers:
        for rule_id, rule_config in rule_configs.items():
            rule = registry.get(rule_id)
            if rule is None:
                raise ConfigError(f"`{label}` references unknown rule `{rule_id}`.", rule_id=rule_id)
            if rule_config.severity is not None:
                parse_severity(rule_config.severity, rule_id=rule_id)
            if rule_config.options is not None:
                try:
                    rule.validate_options(rule_config.options)
                except (TypeError, ValueError) as exc:
                    raise ConfigError(f"Invalid options for rule `{rule_id}`: {exc}", rule_id=rule_id) from exc


def resolve(config: LintConfig, path: str | PurePath, *, registry: RuleRegistry) -> ActiveRuleSet:
    """Compute enablement, severity and options per rule for `path`.

    Layers apply in order: rule defaults, global settings, then every
    matching path override from least to most specific. Overrides with
    equal specificity apply in declaration order, so the later one wins.
    """
    validate_config(config, registry)
    normalized = normalize_path(path)
    if not config.files.matches(normalized):
        logger.debug("path %s excluded by file filter", normalized)
        return ActiveRuleSet(path=normalized, rules=(), skipped=True)

    layers: list[Mapping[str, RuleConfig]] = [config.rules]
    layers.extend(override.rules for override in _matching_overrides(config.overrides, normalized))

    active: list[ActiveRule] = []
    for rule in registry:
        enabled = rule.default_enabled
        severity: Severity = rule.default_severity
        options: dict[str, Any] = {}
        for layer in layers:
            rule_config = layer.get(rule.id)
            if rule_config is None:
                continue
            if rule_config.enabled is not None:
                enabled = rule_config.enabled
            if rule_config.severity is not None:
                severity = parse_severity(rule_config.severity, rule_id=rule.id)
            if rule_config.options is not None:
                options.update(rule_config.options)
        if not enabled:
            continue
        active.append(ActiveRule(rule=rule, severity=severity, options=MappingProxyType(options)))

    return ActiveRuleSet(path=normalized, rules=tuple(active))


def _matching_overrides(overrides: tuple[PathOverride, ...], path: str) -> list[PathOverride]:
    scored: list[tuple[tuple[int, int], int, PathOverride]] = []
    for index, override in enumerate(overrides):
        specificity = override.files.specificity(path)
        if specificity is None:
            continue
        scored.append((specificity, index, override))
    scored.sort(key=lambda item: (item[0], item[1]))
    return [override for _, _, override in scored]
