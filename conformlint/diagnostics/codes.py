"""Engine-owned diagnostic codes and messages."""

from dataclasses import dataclass
from typing import Final

from conformlint.diagnostics.diagnostic import Severity

RESERVED_RULE_PREFIX: Final[str] = "ENGINE_"


@dataclass(frozen=True, slots=True)
class DiagnosticSpec:
    code: str
    message: str
    hint: str | None = None
    severity: Severity = "error"
    category: str | None = None


ENGINE_PARSE_FAILURE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ENGINE_PARSE_FAILURE",
    message="Document could not be parsed; no rules were evaluated.",
    hint="Fix the syntax error before linting this document.",
    severity="error",
    category="engine",
)

ENGINE_MALFORMED_TREE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ENGINE_PARSE_FAILURE",
    message="Parser produced a tree that violates span nesting.",
    severity="error",
    category="engine",
)

ENGINE_NO_PARSER: Final[DiagnosticSpec] = DiagnosticSpec(
    code="ENGINE_PARSE_FAILURE",
    message="No parser is registered for this document type.",
    severity="error",
    category="engine",
)
