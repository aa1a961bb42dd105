"""1回分の検証実行。ルールセットを宣言順に評価してFindingを集める。"""

from collections.abc import Mapping
from pathlib import Path

import structlog

from gangway.models.validation import Finding, RunState, Severity
from gangway.probe.artifact import ArtifactProbe
from gangway.validators.rules import RuleSet

logger = structlog.get_logger()

TARGET_ROOT_CATEGORY = "TargetRoot"


class ValidationRun:
    """idle → running → completed の順に遷移する検証実行。

    execute()は呼び出すたびに最初から評価し直す。途中からの再開は行わない。
    """

    def __init__(
        self,
        target_root: Path,
        rule_sets: list[RuleSet],
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.target_root = target_root
        self.rule_sets = rule_sets
        self._environ = environ
        self._findings: list[Finding] = []
        self.state = RunState.IDLE

    @property
    def findings(self) -> list[Finding]:
        return list(self._findings)

    @property
    def categories(self) -> list[str]:
        return [TARGET_ROOT_CATEGORY, *(rs.category for rs in self.rule_sets)]

    def execute(self) -> list[Finding]:
        self._findings = []
        self.state = RunState.RUNNING

        if not self.target_root.is_dir():
            logger.error("target_root_missing", target_root=str(self.target_root))
            self._findings.append(
                Finding(
                    category=TARGET_ROOT_CATEGORY,
                    rule_id="target-root",
                    severity=Severity.CRITICAL,
                    message=f"Target root does not exist or is not a directory: {self.target_root}",
                )
            )
            self.state = RunState.COMPLETED
            return self.findings

        probe = ArtifactProbe(self.target_root, environ=self._environ)
        for rule_set in self.rule_sets:
            findings = rule_set.evaluate(probe)
            self._findings.extend(findings)
            logger.debug(
                "rule_set_evaluated",
                category=rule_set.category,
                findings=len(findings),
                failed=sum(1 for f in findings if f.severity != Severity.SUCCESS),
            )

        self.state = RunState.COMPLETED
        return self.findings
