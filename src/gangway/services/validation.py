"""検証の実行・集計・判定をまとめるサービス。"""

import time
from collections.abc import Mapping
from pathlib import Path

import structlog

from gangway.models.validation import ExitCodePolicy, Profile, Thresholds, ValidationReport
from gangway.services import aggregator, reporter
from gangway.services.run import ValidationRun
from gangway.validators.loader import RuleSetLoader

logger = structlog.get_logger()


class ValidationService:
    """プロファイルに従って検証を実行し、ValidationReportを生成する。

    プロセスの終了は行わない。終了コードはレポートの値として返す。
    """

    def __init__(self, config_dir: Path, default_profile: str = "app-store") -> None:
        self._loader = RuleSetLoader(config_dir)
        self._default_profile = default_profile

    @property
    def loader(self) -> RuleSetLoader:
        return self._loader

    @property
    def default_profile(self) -> str:
        return self._default_profile

    def profiles(self) -> list[Profile]:
        return list(self._loader.profiles().values())

    def profile(self, name: str | None = None) -> Profile:
        """
        Raises:
            ProfileNotFoundError: プロファイルが存在しない場合。
        """
        return self._loader.profile(name or self._default_profile)

    def validate(
        self,
        target_root: Path,
        profile: str | None = None,
        *,
        strict: bool = False,
        max_warnings: int | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ValidationReport:
        """target_rootをプロファイルのルールセットで検証する。

        Args:
            target_root: 検証対象プロジェクトのルート。
            profile: プロファイル名。Noneの場合はデフォルトプロファイル。
            strict: ATTENTIONもブロック扱い（終了コード1）にする。
            max_warnings: プロファイルの警告数しきい値を上書きする。
            environ: 環境変数の参照先。Noneの場合はos.environ。

        Returns:
            全ルールの評価結果と判定を含むレポート。

        Raises:
            ProfileNotFoundError: プロファイルが存在しない場合。
            RuleDefinitionError: ルール定義が不正な場合。
        """
        selected = self.profile(profile)
        rule_sets = self._loader.rule_sets_for(selected)
        thresholds = selected.thresholds
        if max_warnings is not None:
            thresholds = Thresholds(max_warnings=max_warnings)
        policy = ExitCodePolicy.strict() if strict else selected.exit_codes

        start_time = time.perf_counter()
        logger.info("validation_started", target_root=str(target_root), profile=selected.name)

        run = ValidationRun(target_root, rule_sets, environ=environ)
        findings = run.execute()
        summary = aggregator.aggregate(findings)
        result = aggregator.verdict(summary, thresholds)
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        logger.info(
            "validation_complete",
            profile=selected.name,
            verdict=result.value,
            success=summary.success_count,
            warnings=summary.warning_count,
            errors=summary.error_count,
            critical=summary.critical_count,
            duration_ms=duration_ms,
        )

        return ValidationReport(
            target_root=str(target_root),
            profile=selected.name,
            findings=findings,
            summary=summary,
            verdict=result,
            exit_code=reporter.exit_code(result, policy),
            duration_ms=duration_ms,
        )

    def render(self, report: ValidationReport) -> str:
        title = f"{self.profile(report.profile).title}: {report.target_root}"
        return reporter.render(report.summary, report.verdict, report.findings, title=title)
