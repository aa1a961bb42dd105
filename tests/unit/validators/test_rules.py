"""Rule・RuleSetのユニットテスト。"""

import json
from pathlib import Path

from gangway.models.errors import ArtifactReadError
from gangway.models.validation import Outcome, Severity
from gangway.probe.artifact import ArtifactProbe
from gangway.validators.checks import CheckResult, build_predicate
from gangway.validators.rules import Rule, RuleSet, render_message

PASS = Outcome(severity=Severity.SUCCESS, message="Version: {value}")
FAIL = Outcome(severity=Severity.ERROR, message="Version {reason}")


def _version_rule(**kwargs: object) -> Rule:
    return Rule(
        rule_id="app-version",
        category="AppConfiguration",
        predicate=build_predicate("json_field", {"path": "app.json", "field": "expo.version"}),
        on_pass=PASS,
        on_fail=FAIL,
        **kwargs,  # type: ignore[arg-type]
    )


class TestRenderMessage:
    def test_fills_placeholders(self) -> None:
        assert render_message("{name} set ({masked})", {"name": "DEVELOPMENT_TEAM", "masked": "AB…45"}) == (
            "DEVELOPMENT_TEAM set (AB…45)"
        )

    def test_unknown_placeholder_is_kept(self) -> None:
        assert render_message("Found {path} in {where}", {"path": "app.json"}) == "Found app.json in <where>"

    def test_broken_template_is_returned_verbatim(self) -> None:
        assert render_message("unbalanced {", {}) == "unbalanced {"


class TestRuleEvaluate:
    def test_pass(self, tmp_path: Path, probe: ArtifactProbe) -> None:
        (tmp_path / "app.json").write_text(json.dumps({"expo": {"version": "2.0.0"}}), encoding="utf-8")
        finding = _version_rule().evaluate(probe)
        assert finding.severity == Severity.SUCCESS
        assert finding.message == "Version: 2.0.0"
        assert finding.rule_id == "app-version"
        assert finding.category == "AppConfiguration"

    def test_fail(self, tmp_path: Path, probe: ArtifactProbe) -> None:
        (tmp_path / "app.json").write_text(json.dumps({"expo": {}}), encoding="utf-8")
        finding = _version_rule().evaluate(probe)
        assert finding.severity == Severity.ERROR
        assert finding.message == "Version not configured"

    def test_missing_input_uses_default_skip(self, probe: ArtifactProbe) -> None:
        finding = _version_rule().evaluate(probe)
        assert finding.severity == Severity.WARNING
        assert finding.message == "app-version: cannot evaluate (not found: app.json)"

    def test_missing_input_uses_declared_skip(self, probe: ArtifactProbe) -> None:
        skip = Outcome(severity=Severity.ERROR, message="Cannot read {path}")
        finding = _version_rule(on_skip=skip).evaluate(probe)
        assert finding.severity == Severity.ERROR
        assert finding.message == "Cannot read app.json"

    def test_parse_error_uses_fail_severity_with_cause(self, tmp_path: Path, probe: ArtifactProbe) -> None:
        (tmp_path / "app.json").write_text('{"expo": {"version": }', encoding="utf-8")
        finding = _version_rule().evaluate(probe)
        assert finding.severity == Severity.ERROR
        assert finding.message.startswith("app-version: invalid JSON in app.json: ")
        assert "Expecting value" in finding.message

    def test_read_error_uses_fail_severity_with_cause(self, probe: ArtifactProbe) -> None:
        def unreadable(_: ArtifactProbe) -> CheckResult:
            raise ArtifactReadError("app.json", "permission denied")

        rule = Rule("app-version", "AppConfiguration", unreadable, PASS, FAIL)
        finding = rule.evaluate(probe)
        assert finding.severity == Severity.ERROR
        assert finding.message == "app-version: cannot read app.json: permission denied"

    def test_undecodable_file_uses_fail_severity(self, tmp_path: Path, probe: ArtifactProbe) -> None:
        (tmp_path / "app.json").write_bytes(b'{"expo": {"name": "\xff\xfe"}}')
        finding = _version_rule().evaluate(probe)
        assert finding.severity == Severity.ERROR
        assert finding.message.startswith("app-version: cannot read app.json: ")

    def test_unexpected_exception_becomes_error_finding(self, probe: ArtifactProbe) -> None:
        def broken(_: ArtifactProbe) -> CheckResult:
            raise RuntimeError("boom")

        rule = Rule("broken", "AppConfiguration", broken, PASS, FAIL)
        finding = rule.evaluate(probe)
        assert finding.severity == Severity.ERROR
        assert finding.message == "broken: check failed unexpectedly: boom"

    def test_path_outside_root_is_a_skip(self, probe: ArtifactProbe) -> None:
        rule = Rule(
            "escape",
            "Security",
            build_predicate("text_contains", {"path": "../secrets.txt", "needle": "x"}),
            PASS,
            FAIL,
        )
        finding = rule.evaluate(probe)
        assert finding.severity == Severity.WARNING
        assert "escapes the target root" in finding.message


class TestRuleSet:
    def test_one_finding_per_rule_in_declared_order(self, tmp_path: Path, probe: ArtifactProbe) -> None:
        (tmp_path / "app.json").write_text("{}", encoding="utf-8")
        rules = [
            Rule(
                "manifest",
                "AppConfiguration",
                build_predicate("file_exists", {"path": "app.json"}),
                Outcome(severity=Severity.SUCCESS, message="found"),
                Outcome(severity=Severity.ERROR, message="missing"),
            ),
            _version_rule(),
            Rule(
                "package",
                "AppConfiguration",
                build_predicate("file_exists", {"path": "package.json"}),
                Outcome(severity=Severity.SUCCESS, message="found"),
                Outcome(severity=Severity.WARNING, message="missing"),
            ),
        ]
        findings = RuleSet("AppConfiguration", "App configuration", rules).evaluate(probe)
        assert [f.rule_id for f in findings] == ["manifest", "app-version", "package"]
        assert [f.severity for f in findings] == [Severity.SUCCESS, Severity.ERROR, Severity.WARNING]

    def test_empty_rule_set(self, probe: ArtifactProbe) -> None:
        assert RuleSet("Empty", "Nothing", []).evaluate(probe) == []
