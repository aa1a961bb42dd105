"""Findingの集計と判定。メッセージは参照せず、重大度とカテゴリのみを使う。"""

from collections.abc import Iterable

from gangway.models.validation import Finding, Severity, Summary, Thresholds, Verdict

_COUNT_FIELDS = {
    Severity.SUCCESS: "success_count",
    Severity.WARNING: "warning_count",
    Severity.ERROR: "error_count",
    Severity.CRITICAL: "critical_count",
}


def aggregate(findings: Iterable[Finding]) -> Summary:
    """重大度ごとの件数とカテゴリ別のFinding一覧を返す。"""
    summary = Summary()
    for finding in findings:
        field = _COUNT_FIELDS[finding.severity]
        setattr(summary, field, getattr(summary, field) + 1)
        summary.findings_by_category.setdefault(finding.category, []).append(finding)
    return summary


def verdict(summary: Summary, thresholds: Thresholds) -> Verdict:
    """最も重大なものを優先して判定する。

    critical > error > 警告数のしきい値超過 > 承認 の順序は固定。
    """
    if summary.critical_count > 0:
        return Verdict.CRITICAL
    if summary.error_count > 0:
        return Verdict.FAILED
    if thresholds.max_warnings is not None and summary.warning_count > thresholds.max_warnings:
        return Verdict.ATTENTION
    return Verdict.APPROVED


def pass_rate(summary: Summary) -> int:
    """成功したFindingの割合（%）。Findingが無い場合は0。"""
    if summary.total == 0:
        return 0
    return round(summary.success_count * 100 / summary.total)
