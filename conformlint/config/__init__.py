"""Rule configuration and per-path resolution."""

from conformlint.config.model import (
    LintConfig,
    PathFilter,
    PathOverride,
    RuleConfig,
    normalize_path,
    parse_severity,
)
from conformlint.config.resolve import ActiveRule, ActiveRuleSet, resolve, validate_config

__all__ = [
    "ActiveRule",
    "ActiveRuleSet",
    "LintConfig",
    "PathFilter",
    "PathOverride",
    "RuleConfig",
    "normalize_path",
    "parse_severity",
    "resolve",
    "validate_config",
]
