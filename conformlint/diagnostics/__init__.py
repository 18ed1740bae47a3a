"""Diagnostics."""

from conformlint.diagnostics.codes import (
    ENGINE_MALFORMED_TREE,
    ENGINE_NO_PARSER,
    ENGINE_PARSE_FAILURE,
    RESERVED_RULE_PREFIX,
    DiagnosticSpec,
)
from conformlint.diagnostics.diagnostic import SEVERITIES, Diagnostic, Severity
from conformlint.diagnostics.edit import Edit
from conformlint.diagnostics.report import (
    collect_diagnostics,
    count_by_severity,
    has_errors,
    sort_diagnostics,
)

__all__ = [
    "ENGINE_MALFORMED_TREE",
    "ENGINE_NO_PARSER",
    "ENGINE_PARSE_FAILURE",
    "RESERVED_RULE_PREFIX",
    "SEVERITIES",
    "Diagnostic",
    "DiagnosticSpec",
    "Edit",
    "Severity",
    "collect_diagnostics",
    "count_by_severity",
    "has_errors",
    "sort_diagnostics",
]
