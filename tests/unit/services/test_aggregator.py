"""集計・判定のユニットテスト。"""

import pytest

from gangway.models.validation import Finding, Severity, Summary, Thresholds, Verdict
from gangway.services.aggregator import aggregate, pass_rate, verdict


def _finding(severity: Severity, category: str = "AppConfiguration", rule_id: str = "rule") -> Finding:
    return Finding(category=category, rule_id=rule_id, severity=severity, message=f"{rule_id} {severity.value}")


def _summary(success: int = 0, warning: int = 0, error: int = 0, critical: int = 0) -> Summary:
    return Summary(success_count=success, warning_count=warning, error_count=error, critical_count=critical)


class TestAggregate:
    def test_counts_by_severity(self) -> None:
        findings = [
            _finding(Severity.SUCCESS),
            _finding(Severity.SUCCESS),
            _finding(Severity.WARNING),
            _finding(Severity.ERROR),
            _finding(Severity.CRITICAL),
        ]
        summary = aggregate(findings)
        assert summary.success_count == 2
        assert summary.warning_count == 1
        assert summary.error_count == 1
        assert summary.critical_count == 1
        assert summary.total == len(findings)

    def test_groups_by_category_in_order(self) -> None:
        findings = [
            _finding(Severity.SUCCESS, "CodeSigning", "a"),
            _finding(Severity.WARNING, "AppConfiguration", "b"),
            _finding(Severity.ERROR, "CodeSigning", "c"),
        ]
        summary = aggregate(findings)
        assert list(summary.findings_by_category) == ["CodeSigning", "AppConfiguration"]
        assert [f.rule_id for f in summary.findings_by_category["CodeSigning"]] == ["a", "c"]

    def test_empty(self) -> None:
        summary = aggregate([])
        assert summary.total == 0
        assert summary.findings_by_category == {}

    def test_ignores_message_text(self) -> None:
        first = aggregate([Finding(category="A", rule_id="r", severity=Severity.ERROR, message="one")])
        second = aggregate([Finding(category="A", rule_id="r", severity=Severity.ERROR, message="two")])
        assert first.error_count == second.error_count == 1


class TestVerdict:
    @pytest.mark.parametrize(
        ("summary", "max_warnings", "expected"),
        [
            (_summary(success=10), 5, Verdict.APPROVED),
            (_summary(success=10, warning=5), 5, Verdict.APPROVED),
            (_summary(success=10, warning=6), 5, Verdict.ATTENTION),
            (_summary(success=10, warning=100), None, Verdict.APPROVED),
            (_summary(warning=100, error=1), 5, Verdict.FAILED),
            (_summary(error=3, critical=1), 5, Verdict.CRITICAL),
            (_summary(warning=50, critical=1), None, Verdict.CRITICAL),
        ],
    )
    def test_precedence(self, summary: Summary, max_warnings: int | None, expected: Verdict) -> None:
        assert verdict(summary, Thresholds(max_warnings=max_warnings)) == expected

    def test_zero_threshold_flags_single_warning(self) -> None:
        assert verdict(_summary(warning=1), Thresholds(max_warnings=0)) == Verdict.ATTENTION

    def test_no_findings_is_approved(self) -> None:
        assert verdict(_summary(), Thresholds()) == Verdict.APPROVED


class TestPassRate:
    def test_pass_rate(self) -> None:
        assert pass_rate(_summary(success=3, warning=1)) == 75

    def test_rounds(self) -> None:
        assert pass_rate(_summary(success=2, error=1)) == 67

    def test_empty(self) -> None:
        assert pass_rate(_summary()) == 0
