"""検証結果のテキスト・JSON出力と終了コードへの変換。"""

from gangway.models.validation import (
    ExitCodePolicy,
    Finding,
    Severity,
    Summary,
    ValidationReport,
    Verdict,
)
from gangway.services.aggregator import pass_rate

GLYPHS: dict[Severity, str] = {
    Severity.SUCCESS: "✅",
    Severity.WARNING: "⚠️",
    Severity.ERROR: "❌",
    Severity.CRITICAL: "🚨",
}

VERDICT_GLYPHS: dict[Verdict, str] = {
    Verdict.APPROVED: "✅",
    Verdict.ATTENTION: "⚠️",
    Verdict.FAILED: "❌",
    Verdict.CRITICAL: "🚨",
}

VERDICT_GUIDANCE: dict[Verdict, str] = {
    Verdict.APPROVED: "Project is ready for App Store submission",
    Verdict.ATTENTION: "Too many warnings - review before submitting",
    Verdict.FAILED: "Errors must be fixed before submitting",
    Verdict.CRITICAL: "Critical issues must be fixed before submitting",
}

_RULE = "=" * 60


def _ordered(findings: list[Finding]) -> list[Finding]:
    # 安定ソートなので同じ重大度の中では宣言順が保たれる
    return sorted(findings, key=lambda f: -f.severity.rank)


def render(
    summary: Summary,
    verdict: Verdict,
    findings: list[Finding],
    *,
    title: str = "Deployment readiness report",
) -> str:
    """カテゴリ→重大度の順にまとめたテキストレポートを返す。"""
    by_category: dict[str, list[Finding]] = {}
    for finding in findings:
        by_category.setdefault(finding.category, []).append(finding)

    lines = [_RULE, f"📋 {title}", _RULE]
    for category, category_findings in by_category.items():
        lines.append("")
        lines.append(category)
        for finding in _ordered(category_findings):
            lines.append(f"  {GLYPHS[finding.severity]} {finding.message}")

    lines += [
        "",
        "-" * 60,
        "📊 Summary",
        f"  {GLYPHS[Severity.SUCCESS]} Success:  {summary.success_count}",
        f"  {GLYPHS[Severity.WARNING]} Warnings: {summary.warning_count}",
        f"  {GLYPHS[Severity.ERROR]} Errors:   {summary.error_count}",
        f"  {GLYPHS[Severity.CRITICAL]} Critical: {summary.critical_count}",
        f"  Pass rate: {pass_rate(summary)}%",
        "",
        f"{VERDICT_GLYPHS[verdict]} VERDICT: {verdict.value}",
        VERDICT_GUIDANCE[verdict],
        _RULE,
    ]
    return "\n".join(lines)


def render_json(report: ValidationReport) -> str:
    return report.model_dump_json(indent=2)


def exit_code(verdict: Verdict, policy: ExitCodePolicy | None = None) -> int:
    """判定をプロセス終了コードに変換する。ポリシーに無い判定はブロック扱い(1)。"""
    policy = policy or ExitCodePolicy()
    return policy.codes.get(verdict, 1)
