"""Rule contract, registry and reusable rule templates."""

from conformlint.rules.base import Rule, RuleOptions
from conformlint.rules.catalog import (
    AllowedValuesRule,
    FieldConstraint,
    KeyCase,
    KeyCaseRule,
    OperatorSpacingRule,
    RequiredFieldRule,
    SingleLineBlockRule,
    builtin_rules,
    convert_case,
)
from conformlint.rules.registry import RuleRegistry, validate_rule

__all__ = [
    "AllowedValuesRule",
    "FieldConstraint",
    "KeyCase",
    "KeyCaseRule",
    "OperatorSpacingRule",
    "RequiredFieldRule",
    "Rule",
    "RuleOptions",
    "RuleRegistry",
    "SingleLineBlockRule",
    "builtin_rules",
    "convert_case",
    "validate_rule",
]
