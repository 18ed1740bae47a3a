import pytest

from conformlint.config import LintConfig, PathFilter, RuleConfig, normalize_path, resolve
from conformlint.config.model import _compile_glob
from conformlint.errors import ConfigError
from conformlint.rules import KeyCaseRule, OperatorSpacingRule, SingleLineBlockRule
from tests._support import config_of, registry_of


def _registry():
    return registry_of(SingleLineBlockRule(), OperatorSpacingRule(), KeyCaseRule())


def test_defaults_enable_every_registered_rule_in_id_order() -> None:
    active = resolve(LintConfig(), "a.conf", registry=_registry())

    assert active.skipped is False
    assert active.ids == ("SCHEMA_KEY_CASE", "STYLE_OPERATOR_SPACING", "STYLE_SINGLE_LINE_BLOCK")
    assert [rule.severity for rule in active] == ["warning", "warning", "info"]


def test_opt_in_rule_stays_off_until_config_enables_it() -> None:
    registry = registry_of(OperatorSpacingRule(), KeyCaseRule(default_enabled=False))

    default = resolve(LintConfig(), "a.conf", registry=registry)
    severity_only = resolve(config_of({"SCHEMA_KEY_CASE": "error"}), "a.conf", registry=registry)
    enabled = resolve(config_of({"SCHEMA_KEY_CASE": True}), "a.conf", registry=registry)
    scoped = config_of(overrides=[{"include": ["src/"], "rules": {"SCHEMA_KEY_CASE": {"enabled": True}}}])

    assert default.ids == ("STYLE_OPERATOR_SPACING",)
    assert severity_only.ids == ("STYLE_OPERATOR_SPACING",)
    assert enabled.ids == ("SCHEMA_KEY_CASE", "STYLE_OPERATOR_SPACING")
    assert "SCHEMA_KEY_CASE" in resolve(scoped, "src/a.conf", registry=registry).ids
    assert "SCHEMA_KEY_CASE" not in resolve(scoped, "lib/a.conf", registry=registry).ids


def test_global_rules_disable_and_override_severity() -> None:
    config = config_of({"STYLE_SINGLE_LINE_BLOCK": False, "SCHEMA_KEY_CASE": "ERROR"})

    active = resolve(config, "a.conf", registry=_registry())

    assert active.ids == ("SCHEMA_KEY_CASE", "STYLE_OPERATOR_SPACING")
    key_case = active.get("SCHEMA_KEY_CASE")
    assert key_case is not None
    assert key_case.severity == "error"


def test_options_merge_shallowly_across_layers() -> None:
    config = config_of(
        {"SCHEMA_KEY_CASE": {"options": {"case": "camel", "ignore": ["ID"]}}},
        overrides=[{"include": ["src/**"], "rules": {"SCHEMA_KEY_CASE": {"options": {"case": "kebab"}}}}],
    )

    active = resolve(config, "src/app.conf", registry=_registry()).get("SCHEMA_KEY_CASE")

    assert active is not None
    assert dict(active.options) == {"case": "kebab", "ignore": ["ID"]}


def test_more_specific_override_wins_regardless_of_order() -> None:
    config = config_of(
        overrides=[
            {"include": ["src/legacy/*.conf"], "rules": {"SCHEMA_KEY_CASE": {"enabled": False}}},
            {"include": ["src/**"], "rules": {"SCHEMA_KEY_CASE": "info"}},
        ]
    )
    registry = _registry()

    legacy = resolve(config, "src/legacy/old.conf", registry=registry)
    fresh = resolve(config, "src/new.conf", registry=registry)

    assert "SCHEMA_KEY_CASE" not in legacy.ids
    key_case = fresh.get("SCHEMA_KEY_CASE")
    assert key_case is not None
    assert key_case.severity == "info"


def test_equally_specific_overrides_apply_in_declaration_order() -> None:
    config = config_of(
        overrides=[
            {"include": "*.conf", "rules": {"STYLE_OPERATOR_SPACING": "error"}},
            {"include": "*.conf", "rules": {"STYLE_OPERATOR_SPACING": "info"}},
        ]
    )

    active = resolve(config, "deep/nested/a.conf", registry=_registry()).get("STYLE_OPERATOR_SPACING")

    assert active is not None
    assert active.severity == "info"


def test_override_can_reenable_globally_disabled_rule() -> None:
    config = config_of(
        {"STYLE_SINGLE_LINE_BLOCK": False},
        overrides=[{"include": ["ui/"], "rules": {"STYLE_SINGLE_LINE_BLOCK": True}}],
    )
    registry = _registry()

    assert "STYLE_SINGLE_LINE_BLOCK" in resolve(config, "ui/menu.conf", registry=registry).ids
    assert "STYLE_SINGLE_LINE_BLOCK" not in resolve(config, "core/menu.conf", registry=registry).ids


def test_file_filter_marks_unmatched_paths_skipped() -> None:
    config = config_of(include=["**/*.conf"], exclude=["vendor/"])
    registry = _registry()

    vendored = resolve(config, "vendor/lib.conf", registry=registry)
    other = resolve(config, "notes.txt", registry=registry)
    kept = resolve(config, "./app/main.conf", registry=registry)

    assert vendored.skipped is True
    assert vendored.rules == ()
    assert other.skipped is True
    assert kept.skipped is False
    assert kept.path == "app/main.conf"


def test_path_filter_glob_semantics() -> None:
    assert PathFilter(include=("*.conf",)).matches("a/b/c.conf") is True
    assert PathFilter(include=("src/*.conf",)).matches("src/a/b.conf") is False
    assert PathFilter(include=("src/**/*.conf",)).matches("src/b.conf") is True
    assert PathFilter(include=("src/**/*.conf",)).matches("src/a/b.conf") is True
    assert PathFilter(include=("doc?.conf",)).matches("doc1.conf") is True
    assert PathFilter(include=("doc?.conf",)).matches("doc12.conf") is False
    assert PathFilter().matches("anything") is True
    assert PathFilter(exclude=("*.conf",)).matches("x.conf") is False


def test_compiled_globs_are_memoized() -> None:
    _compile_glob.cache_clear()

    first = _compile_glob("src/**/*.conf")
    second = _compile_glob("src/**/*.conf")

    assert first is second
    assert _compile_glob.cache_info().hits == 1
    assert _compile_glob.cache_info().maxsize is not None


def test_path_filter_specificity_prefers_literal_segments() -> None:
    path_filter = PathFilter(include=("**/*.conf", "src/legacy/*.conf"))

    assert path_filter.specificity("src/legacy/a.conf") == (2, 14)
    assert path_filter.specificity("other/a.conf") == (0, 5)
    assert path_filter.specificity("a.txt") is None


def test_normalize_path_uses_posix_separators() -> None:
    assert normalize_path("./src\\legacy\\a.conf") == "src/legacy/a.conf"


def test_unknown_rule_id_is_config_error() -> None:
    config = config_of({"DOES_NOT_EXIST": True})

    try:
        resolve(config, "a.conf", registry=_registry())
    except ConfigError as exc:
        assert exc.rule_id == "DOES_NOT_EXIST"
        assert "unknown rule" in str(exc)
    else:
        raise AssertionError("Expected ConfigError for unknown rule id")


def test_unknown_rule_id_in_override_is_config_error_for_any_path() -> None:
    config = config_of(overrides=[{"include": ["never/**"], "rules": {"NOPE": "error"}}])

    with pytest.raises(ConfigError, match="overrides\\[0\\]"):
        resolve(config, "a.conf", registry=_registry())


def test_invalid_severity_is_config_error() -> None:
    config = config_of({"SCHEMA_KEY_CASE": "fatal"})

    with pytest.raises(ConfigError, match="Invalid severity `fatal`"):
        resolve(config, "a.conf", registry=_registry())


def test_invalid_options_are_config_error() -> None:
    config = config_of({"SCHEMA_KEY_CASE": {"options": {"case": "screaming"}}})

    try:
        resolve(config, "a.conf", registry=_registry())
    except ConfigError as exc:
        assert exc.rule_id == "SCHEMA_KEY_CASE"
        assert "`case` must be one of" in str(exc)
    else:
        raise AssertionError("Expected ConfigError for invalid rule options")


def test_rule_config_value_forms() -> None:
    assert RuleConfig.from_value("R", True) == RuleConfig(enabled=True)
    assert RuleConfig.from_value("R", "warning") == RuleConfig(severity="warning")
    assert RuleConfig.from_value("R", {"enabled": False, "severity": "info"}) == RuleConfig(
        enabled=False, severity="info"
    )
    with pytest.raises(ConfigError, match="unknown config keys"):
        RuleConfig.from_value("R", {"level": "info"})
    with pytest.raises(ConfigError, match="unsupported config value"):
        RuleConfig.from_value("R", 3)


def test_from_dict_rejects_unknown_top_level_keys() -> None:
    with pytest.raises(ConfigError, match="Unknown top-level config keys: rule"):
        LintConfig.from_dict({"rule": {}})


def test_referenced_rule_ids_cover_every_layer() -> None:
    config = config_of({"A": True}, overrides=[{"include": "x/", "rules": {"B": True, "A": "info"}}])

    assert config.referenced_rule_ids == ("A", "B")
