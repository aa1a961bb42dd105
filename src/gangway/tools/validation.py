"""検証系のMCPツール定義。"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from gangway.models.errors import GangwayError
from gangway.services.validation import ValidationService


def register_validation_tools(mcp: FastMCP, validation_service: ValidationService) -> None:
    """検証関連のMCPツールを登録する。"""

    @mcp.tool()
    async def run_validation(
        target_root: str,
        profile: str | None = None,
        strict: bool = False,
    ) -> dict[str, Any]:
        """プロジェクトのApp Store提出準備状況を検証する。

        指定したディレクトリのapp.json、署名ファイル、CIワークフロー、
        ストアメタデータなどをルールセットに従って検証し、
        重大度別の集計、判定（APPROVED/ATTENTION/FAILED/CRITICAL）、終了コード、
        全Findingとテキストレポートを返します。

        Args:
            target_root: 検証対象プロジェクトのルートディレクトリ（絶対パス推奨）。
            profile: 検証プロファイル名。省略時はデフォルトプロファイル。
            strict: TrueにするとATTENTIONもブロック扱い（exit_code=1）になる。
        """
        try:
            report = validation_service.validate(Path(target_root), profile, strict=strict)
            result = report.model_dump(mode="json", exclude={"summary": {"findings_by_category"}})
            result["text"] = validation_service.render(report)
            return result
        except GangwayError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def list_profiles() -> dict[str, Any]:
        """利用可能な検証プロファイルの一覧を取得する。

        各プロファイルの名前、説明、評価するルールセット、警告数しきい値を返します。
        """
        try:
            return {
                "default": validation_service.default_profile,
                "profiles": [p.model_dump(mode="json", exclude={"exit_codes"}) for p in validation_service.profiles()],
            }
        except GangwayError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def list_rules(profile: str | None = None) -> dict[str, Any]:
        """プロファイルが評価するルールの一覧を取得する。

        Args:
            profile: 検証プロファイル名。省略時はデフォルトプロファイル。
        """
        try:
            selected = validation_service.profile(profile)
            rule_sets = validation_service.loader.rule_sets_for(selected)
            return {
                "profile": selected.name,
                "rule_sets": [
                    {
                        "category": rs.category,
                        "title": rs.title,
                        "rules": [{"id": r.id, "description": r.description} for r in rs.rules],
                    }
                    for rs in rule_sets
                ],
            }
        except GangwayError as e:
            return {"error": type(e).__name__, "message": str(e)}
