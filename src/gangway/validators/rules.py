"""ルールとルールセット。ルール1件の評価は必ずFinding1件を返す。"""

from typing import Any

import structlog

from gangway.models.errors import ArtifactError, ArtifactParseError, ArtifactReadError
from gangway.models.validation import Finding, Outcome, Severity
from gangway.probe.artifact import ArtifactProbe
from gangway.validators.checks import CheckResult, Predicate

logger = structlog.get_logger()


class _TemplateValues(dict):  # type: ignore[type-arg]
    """未定義のプレースホルダを<name>のまま残す。"""

    def __missing__(self, key: str) -> str:
        return f"<{key}>"


def render_message(template: str, values: dict[str, Any]) -> str:
    try:
        return template.format_map(_TemplateValues(values))
    except (ValueError, IndexError, AttributeError):
        return template


class Rule:
    """名前付きの述語と、合格・不合格・評価不能それぞれの結果定義。

    入力ファイルの欠落やルート外のパスは「評価不能」としてon_skipの結果になり、
    読み込み失敗とJSONの構文エラーは不合格の重大度で原因を含めて報告する。
    それ以外の予期しない例外もerrorのFindingに変換し、呼び出し側へは送出しない。
    """

    def __init__(
        self,
        rule_id: str,
        category: str,
        predicate: Predicate,
        on_pass: Outcome,
        on_fail: Outcome,
        on_skip: Outcome | None = None,
        description: str = "",
    ) -> None:
        self.id = rule_id
        self.category = category
        self.predicate = predicate
        self.on_pass = on_pass
        self.on_fail = on_fail
        self.on_skip = on_skip or Outcome(
            severity=Severity.WARNING,
            message=f"{rule_id}: cannot evaluate ({{cause}})",
        )
        self.description = description

    def _finding(self, outcome: Outcome, values: dict[str, Any]) -> Finding:
        return Finding(
            category=self.category,
            rule_id=self.id,
            severity=outcome.severity,
            message=render_message(outcome.message, values),
        )

    def evaluate(self, probe: ArtifactProbe) -> Finding:
        try:
            result: CheckResult = self.predicate(probe)
        except (ArtifactParseError, ArtifactReadError) as e:
            # 存在するのに読めない成果物は不合格として扱う
            logger.error("artifact_unreadable", rule=self.id, path=e.path, error=str(e))
            return Finding(
                category=self.category,
                rule_id=self.id,
                severity=self.on_fail.severity,
                message=f"{self.id}: {e}",
            )
        except ArtifactError as e:
            return self._finding(self.on_skip, {"cause": str(e), "path": e.path})
        except Exception as e:
            logger.error("rule_crashed", rule=self.id, category=self.category, error=str(e))
            return Finding(
                category=self.category,
                rule_id=self.id,
                severity=Severity.ERROR,
                message=f"{self.id}: check failed unexpectedly: {e}",
            )

        if result.passed:
            return self._finding(self.on_pass, result.values)
        return self._finding(self.on_fail, result.values)


class RuleSet:
    """カテゴリ名と、宣言順に評価されるルールの並び。"""

    def __init__(self, category: str, title: str, rules: list[Rule], description: str = "") -> None:
        self.category = category
        self.title = title
        self.rules = rules
        self.description = description

    def evaluate(self, probe: ArtifactProbe) -> list[Finding]:
        return [rule.evaluate(probe) for rule in self.rules]
