"""In-memory lint configuration."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from pathlib import PurePath, PurePosixPath
from types import MappingProxyType
from typing import Any

from conformlint.diagnostics import SEVERITIES, Severity
from conformlint.errors import ConfigError

_GLOB_CHARS = frozenset("*?")

type Specificity = tuple[int, int]


def parse_severity(token: str, *, rule_id: str | None = None) -> Severity:
    normalized = token.strip().lower() if isinstance(token, str) else token
    for severity in SEVERITIES:
        if normalized == severity:
            return severity
    raise ConfigError(
        f"Invalid severity `{token}`"
        + (f" for rule `{rule_id}`" if rule_id else "")
        + f"; expected one of {', '.join(SEVERITIES)}.",
        rule_id=rule_id,
    )


def normalize_path(path: str | PurePath) -> str:
    normalized = PurePosixPath(str(path).replace("\\", "/")).as_posix()
    return normalized.removeprefix("./")


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Per-rule settings; None means inherit from the previous layer."""

    enabled: bool | None = None
    severity: str | None = None
    options: Mapping[str, Any] | None = None

    @staticmethod
    def from_value(rule_id: str, value: object) -> RuleConfig:
        """Accept `true/false`, a severity token, or a `{enabled, severity, options}` mapping."""
        if isinstance(value, RuleConfig):
            return value
        if isinstance(value, bool):
            return RuleConfig(enabled=value)
        if isinstance(value, str):
            return RuleConfig(severity=value)
        if isinstance(value, Mapping):
            unknown = set(value) - {"enabled", "severity", "options"}
            if unknown:
                raise ConfigError(
                    f"Rule `{rule_id}` has unknown config keys: {', '.join(sorted(unknown))}.",
                    rule_id=rule_id,
                )
            enabled = value.get("enabled")
            if enabled is not None and not isinstance(enabled, bool):
                raise ConfigError(f"Rule `{rule_id}` has non-boolean `enabled`.", rule_id=rule_id)
            severity = value.get("severity")
            if severity is not None and not isinstance(severity, str):
                raise ConfigError(f"Rule `{rule_id}` has non-string `severity`.", rule_id=rule_id)
            options = value.get("options")
            if options is not None and not isinstance(options, Mapping):
                raise ConfigError(f"Rule `{rule_id}` has non-mapping `options`.", rule_id=rule_id)
            return RuleConfig(enabled=enabled, severity=severity, options=options)
        raise ConfigError(f"Rule `{rule_id}` has unsupported config value {value!r}.", rule_id=rule_id)


@dataclass(frozen=True, slots=True)
class PathFilter:
    """Include/exclude globs over POSIX-style relative paths.

    `*` and `?` stay within one path segment, `**` spans segments, a pattern
    without `/` matches at any depth and a trailing `/` selects a directory's
    contents. An empty include list matches every path.
    """

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    def matches(self, path: str | PurePath) -> bool:
        return self.specificity(path) is not None

    def specificity(self, path: str | PurePath) -> Specificity | None:
        """Best include specificity for a matching path, None when not matched."""
        normalized = normalize_path(path)
        if any(_compile_glob(pattern).match(normalized) for pattern in self.exclude):
            return None
        if not self.include:
            return (0, 0)
        best: Specificity | None = None
        for pattern in self.include:
            if not _compile_glob(pattern).match(normalized):
                continue
            score = _pattern_specificity(pattern)
            if best is None or score > best:
                best = score
        return best


@dataclass(frozen=True, slots=True)
class PathOverride:
    """Rule settings applied to documents matched by `files`."""

    files: PathFilter
    rules: Mapping[str, RuleConfig] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class LintConfig:
    """Resolved in-memory configuration for one run."""

    rules: Mapping[str, RuleConfig] = field(default_factory=lambda: MappingProxyType({}))
    overrides: tuple[PathOverride, ...] = ()
    files: PathFilter = field(default_factory=PathFilter)

    @cached_property
    def referenced_rule_ids(self) -> tuple[str, ...]:
        seen: dict[str, None] = dict.fromkeys(self.rules)
        for override in self.overrides:
            seen.update(dict.fromkeys(override.rules))
        return tuple(seen)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> LintConfig:
        """Build from `{rules: {id: ...}, overrides: [{include, exclude, rules}], include, exclude}`."""
        unknown = set(data) - {"rules", "overrides", "include", "exclude"}
        if unknown:
            raise ConfigError(f"Unknown top-level config keys: {', '.join(sorted(unknown))}.")
        overrides: list[PathOverride] = []
        for index, raw_override in enumerate(_as_sequence(data.get("overrides", ()), "overrides")):
            if not isinstance(raw_override, Mapping):
                raise ConfigError(f"Override #{index} must be a mapping.")
            overrides.append(
                PathOverride(
                    files=PathFilter(
                        include=_as_patterns(raw_override.get("include", ()), f"overrides[{index}].include"),
                        exclude=_as_patterns(raw_override.get("exclude", ()), f"overrides[{index}].exclude"),
                    ),
                    rules=_rule_configs(raw_override.get("rules", {})),
                )
            )
        return LintConfig(
            rules=_rule_configs(data.get("rules", {})),
            overrides=tuple(overrides),
            files=PathFilter(
                include=_as_patterns(data.get("include", ()), "include"),
                exclude=_as_patterns(data.get("exclude", ()), "exclude"),
            ),
        )


def _rule_configs(raw: object) -> Mapping[str, RuleConfig]:
    if not isinstance(raw, Mapping):
        raise ConfigError("`rules` must be a mapping of rule id to settings.")
    return MappingProxyType({str(rule_id): RuleConfig.from_value(str(rule_id), value) for rule_id, value in raw.items()})


def _as_sequence(raw: object, label: str) -> Sequence[object]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ConfigError(f"`{label}` must be a list.")
    return raw


def _as_patterns(raw: object, label: str) -> tuple[str, ...]:
    if isinstance(raw, str):
        return (raw,)
    patterns = _as_sequence(raw, label)
    if not all(isinstance(pattern, str) for pattern in patterns):
        raise ConfigError(f"`{label}` must contain only glob strings.")
    return tuple(str(pattern) for pattern in patterns)


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    normalized = pattern.strip().removeprefix("./")
    anchored = "/" in normalized.rstrip("/")
    if normalized.endswith("/"):
        normalized += "**"
    parts: list[str] = [] if anchored else ["(?:.*/)?"]
    index = 0
    while index < len(normalized):
        if normalized.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif normalized.startswith("**", index):
            parts.append(".*")
            index += 2
        elif normalized[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif normalized[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(normalized[index]))
            index += 1
    return re.compile("".join(parts) + r"\Z")


def _pattern_specificity(pattern: str) -> Specificity:
    segments = [segment for segment in pattern.strip().removeprefix("./").split("/") if segment]
    literal_segments = sum(1 for segment in segments if not (_GLOB_CHARS & set(segment)))
    literal_chars = sum(1 for char in pattern if char not in _GLOB_CHARS and char != "/")
    return (literal_segments, literal_chars)
