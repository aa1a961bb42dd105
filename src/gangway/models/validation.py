"""バリデーション関連のデータモデル。"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """検証結果の重大度。定義順に提出をブロックする度合いが高くなる。"""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.SUCCESS, Severity.WARNING, Severity.ERROR, Severity.CRITICAL]


class Verdict(str, Enum):
    """検証結果全体の判定。"""

    APPROVED = "APPROVED"
    ATTENTION = "ATTENTION"
    FAILED = "FAILED"
    CRITICAL = "CRITICAL"


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class Finding(BaseModel):
    """ルール1件の評価結果。発行後は変更しない。"""

    model_config = ConfigDict(frozen=True)

    category: str
    rule_id: str
    severity: Severity
    message: str


class Outcome(BaseModel):
    """ルールの評価結果に対応する重大度とメッセージテンプレート。"""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str


class RuleDefinition(BaseModel):
    """ルール定義（YAMLから読み込み）。"""

    id: str
    check: str
    description: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
    on_pass: Outcome
    on_fail: Outcome
    on_skip: Outcome | None = None


class RuleSetDefinition(BaseModel):
    """カテゴリ単位のルールセット定義（YAMLから読み込み）。"""

    category: str
    title: str
    description: str = ""
    rules: list[RuleDefinition]


class Thresholds(BaseModel):
    """判定のしきい値。max_warningsがNoneの場合は警告数を判定に使わない。"""

    max_warnings: int | None = None


class ExitCodePolicy(BaseModel):
    """判定からプロセス終了コードへの対応表。"""

    codes: dict[Verdict, int] = Field(
        default_factory=lambda: {
            Verdict.APPROVED: 0,
            Verdict.ATTENTION: 0,
            Verdict.FAILED: 1,
            Verdict.CRITICAL: 1,
        }
    )

    @classmethod
    def strict(cls) -> "ExitCodePolicy":
        """ATTENTIONもブロック扱いにするポリシー。"""
        policy = cls()
        policy.codes[Verdict.ATTENTION] = 1
        return policy


class Profile(BaseModel):
    """検証プロファイル（profiles.yamlから読み込み）。"""

    name: str
    title: str
    description: str = ""
    rule_sets: list[str]
    thresholds: Thresholds = Field(default_factory=Thresholds)
    exit_codes: ExitCodePolicy = Field(default_factory=ExitCodePolicy)


class Summary(BaseModel):
    """重大度別の集計結果。"""

    success_count: int = 0
    warning_count: int = 0
    error_count: int = 0
    critical_count: int = 0
    findings_by_category: dict[str, list[Finding]] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.success_count + self.warning_count + self.error_count + self.critical_count


class ValidationReport(BaseModel):
    """1回の検証実行の最終結果。"""

    target_root: str
    profile: str
    findings: list[Finding]
    summary: Summary
    verdict: Verdict
    exit_code: int
    duration_ms: float = 0.0
