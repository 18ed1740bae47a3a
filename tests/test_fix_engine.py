import threading
from collections.abc import Sequence
from dataclasses import dataclass

import pytest

from conformlint.config import LintConfig, resolve
from conformlint.diagnostics import Diagnostic, Edit, Severity
from conformlint.fix import FixEngine, FixOutcome, FixState
from conformlint.lint import DiagnosticSet
from conformlint.rules import RequiredFieldRule, RuleOptions
from conformlint.tree import Tree
from tests._support import PARSER, ScalarRewriteRule, config_of, registry_of

SERVER_SOURCE = 'server = {\n    host = "localhost"\n}\n'
SERVER_FIXED = 'server = {\n    host = "localhost"\n    port = 8080\n}\n'


@dataclass(frozen=True, slots=True)
class _QuoteValueRule:
    id: str = "A_QUOTE"
    name: str = "quoteValue"
    category: str = "style"
    default_severity: Severity = "warning"
    can_fix: bool = True
    default_enabled: bool = True

    def validate_options(self, options: RuleOptions) -> None:
        return None

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        return [
            Diagnostic(
                rule_id=self.id,
                message="Value should be quoted.",
                span=node.span,
                fix=(Edit.replace(node.span, f'"{node.attribute("raw")}"'),),
            )
            for node in tree.find("scalar")
            if not node.attribute("quoted")
        ]


@dataclass(frozen=True, slots=True)
class _LowercaseValueRule:
    id: str = "B_LOWER"
    name: str = "lowercaseValue"
    category: str = "style"
    default_severity: Severity = "warning"
    can_fix: bool = True
    default_enabled: bool = True

    def validate_options(self, options: RuleOptions) -> None:
        return None

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        return [
            Diagnostic(
                rule_id=self.id,
                message="Value should be lowercase.",
                span=node.span,
                fix=(Edit.replace(node.span, str(node.attribute("raw")).lower()),),
            )
            for node in tree.find("scalar")
            if str(node.attribute("value")) != str(node.attribute("value")).lower()
        ]


@dataclass(frozen=True, slots=True)
class _CancellingRule:
    """Requests cancellation while proposing a fix."""

    event: threading.Event
    id: str = "CANCEL_AFTER_FIX"
    name: str = "cancelAfterFix"
    category: str = "suspicious"
    default_severity: Severity = "warning"
    can_fix: bool = True
    default_enabled: bool = True

    def validate_options(self, options: RuleOptions) -> None:
        return None

    def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
        self.event.set()
        return [
            Diagnostic(
                rule_id=self.id,
                message="Bump the value.",
                span=node.span,
                fix=(Edit.replace(node.span, str(node.attribute("raw")) + "1"),),
            )
            for node in tree.find("scalar")
        ]


def _engine(*rules, config: LintConfig | None = None, **kwargs) -> FixEngine:
    active = resolve(config or LintConfig(), "doc.conf", registry=registry_of(*rules))
    return FixEngine(parser=PARSER, active_rules=active, **kwargs)


def _required_port() -> LintConfig:
    return config_of({"SCHEMA_REQUIRED_FIELD": {"options": {"required": {"server": {"port": "8080"}}}}})


def test_missing_required_field_is_inserted_in_one_pass() -> None:
    engine = _engine(RequiredFieldRule(), config=_required_port())

    result = engine.run(SERVER_SOURCE, "doc.conf")

    assert result.outcome is FixOutcome.CONVERGED
    assert result.final_text == SERVER_FIXED
    assert result.pass_count == 1
    assert result.version == 1
    assert result.diagnostics == ()
    assert [d.rule_id for d in result.applied] == ["SCHEMA_REQUIRED_FIELD"]
    assert result.changed is True
    assert result.trace == (
        FixState.PARSING,
        FixState.EVALUATING,
        FixState.COMPOSING,
        FixState.APPLYING,
        FixState.RETRYING,
        FixState.PARSING,
        FixState.EVALUATING,
        FixState.CONVERGED,
    )


def test_fixed_output_has_no_remaining_violation_on_recheck() -> None:
    engine = _engine(RequiredFieldRule(), config=_required_port())

    first = engine.run(SERVER_SOURCE, "doc.conf")
    checked = engine.check(first.final_text, "doc.conf")

    assert isinstance(checked, DiagnosticSet)
    assert checked.diagnostics == ()


def test_fixing_fixed_text_is_idempotent() -> None:
    engine = _engine(RequiredFieldRule(), config=_required_port())

    first = engine.run(SERVER_SOURCE, "doc.conf")
    second = engine.run(first.final_text, "doc.conf")

    assert second.final_text == first.final_text
    assert second.pass_count == 1
    assert second.changed is False
    assert second.applied == ()


def test_conflicting_fixes_land_in_separate_passes() -> None:
    engine = _engine(_LowercaseValueRule(), _QuoteValueRule())

    result = engine.run("name = FOO\n", "doc.conf")

    assert result.outcome is FixOutcome.CONVERGED
    assert result.final_text == 'name = "foo"\n'
    assert result.pass_count == 2
    assert [d.rule_id for d in result.applied] == ["A_QUOTE", "B_LOWER"]
    first_pass = result.passes[0]
    assert (first_pass.accepted, first_pass.rejected, first_pass.applied) == (1, 1, True)


def test_non_converging_fixes_stop_at_pass_cap() -> None:
    engine = _engine(
        ScalarRewriteRule("TOGGLE_ON", target="on", replacement="off"),
        ScalarRewriteRule("TOGGLE_OFF", target="off", replacement="on"),
        max_passes=3,
    )

    result = engine.run("state = on\n", "doc.conf")

    assert result.outcome is FixOutcome.CAPPED
    assert result.pass_count == 3
    assert result.final_text == "state = off\n"
    assert [d.rule_id for d in result.diagnostics] == ["TOGGLE_OFF"]
    assert result.diagnostics[0].version == 3
    assert result.fixable == result.diagnostics


def test_fix_that_breaks_syntax_fails_with_parse_diagnostic() -> None:
    engine = _engine(ScalarRewriteRule("BREAK", target="broken", replacement="{"))

    result = engine.run("a = broken\n", "doc.conf")

    assert result.outcome is FixOutcome.FAILED
    assert result.final_text == "a = {\n"
    assert result.pass_count == 1
    (diagnostic,) = result.diagnostics
    assert diagnostic.rule_id == "ENGINE_PARSE_FAILURE"
    assert diagnostic.message == "Missing closing brace"
    assert diagnostic.version == 1
    assert result.parse_failure is not None


def test_unparsable_input_fails_without_evaluating_rules() -> None:
    event = threading.Event()
    engine = _engine(_CancellingRule(event))

    result = engine.run("a = \n", "doc.conf")

    assert result.outcome is FixOutcome.FAILED
    assert result.final_text == "a = \n"
    assert [d.rule_id for d in result.diagnostics] == ["ENGINE_PARSE_FAILURE"]
    assert event.is_set() is False


def test_cancel_before_start_returns_source_unchanged() -> None:
    event = threading.Event()
    event.set()
    engine = _engine(ScalarRewriteRule("R", target="x", replacement="y"), cancel=event)

    result = engine.run("a = x\n", "doc.conf")

    assert result.outcome is FixOutcome.CANCELLED
    assert result.final_text == "a = x\n"
    assert result.diagnostics == ()
    assert result.pass_count == 1


def test_cancel_between_passes_keeps_last_applied_version() -> None:
    event = threading.Event()
    engine = _engine(_CancellingRule(event), cancel=event)

    result = engine.run("a = 1\n", "doc.conf")

    assert result.outcome is FixOutcome.CANCELLED
    assert result.final_text == "a = 11\n"
    assert result.version == 1
    assert result.pass_count == 1
    assert result.diagnostics == ()


def test_cancel_reports_what_the_last_pass_left_unfixed() -> None:
    event = threading.Event()
    engine = _engine(
        _CancellingRule(event),
        ScalarRewriteRule("Z_REWRITE", target="1", replacement="2", default_severity="error"),
        cancel=event,
    )

    result = engine.run("a = 1\n", "doc.conf")

    assert result.outcome is FixOutcome.CANCELLED
    assert result.final_text == "a = 11\n"
    assert [d.rule_id for d in result.applied] == ["CANCEL_AFTER_FIX"]
    (leftover,) = result.diagnostics
    assert (leftover.rule_id, leftover.version, leftover.fix) == ("Z_REWRITE", 0, None)
    assert [d.rule_id for d in result.rejected] == ["Z_REWRITE"]
    assert result.has_errors is True


def test_malformed_fix_is_reported_without_fix() -> None:
    @dataclass(frozen=True, slots=True)
    class _BackwardsFixRule:
        id: str = "BACKWARDS"
        name: str = "backwards"
        category: str = "correctness"
        default_severity: Severity = "error"
        can_fix: bool = True
        default_enabled: bool = True

        def validate_options(self, options: RuleOptions) -> None:
            return None

        def evaluate(self, tree: Tree, source: str, options: RuleOptions) -> Sequence[Diagnostic]:
            span = tree.root.span
            return [
                Diagnostic(
                    rule_id=self.id,
                    message="Edits out of order.",
                    span=span,
                    fix=(Edit.insert(span.end, "b"), Edit.insert(0, "a")),
                )
            ]

    result = _engine(_BackwardsFixRule()).run("a = 1\n", "doc.conf")

    assert result.outcome is FixOutcome.CONVERGED
    assert result.final_text == "a = 1\n"
    (diagnostic,) = result.diagnostics
    assert diagnostic.fix is None
    assert result.has_errors is True
    assert result.passes[-1].malformed == 1


def test_check_never_rewrites_text() -> None:
    engine = _engine(RequiredFieldRule(), config=_required_port())

    checked = engine.check(SERVER_SOURCE, "doc.conf")

    assert isinstance(checked, DiagnosticSet)
    assert [d.is_fixable for d in checked] == [True]
    assert checked.version == 0


def test_max_passes_must_be_positive() -> None:
    with pytest.raises(ValueError, match="at least 1"):
        _engine(max_passes=0)
