"""ルール定義のMCPリソース定義。"""

from pathlib import Path

import yaml
from fastmcp import FastMCP


def register_rule_resources(mcp: FastMCP, config_dir: Path) -> None:
    """ルールセット・プロファイル定義のMCPリソースを登録する。"""

    @mcp.resource("gangway://profiles")
    async def profiles() -> str:
        """検証プロファイル定義を取得する。"""
        profiles_file = config_dir / "profiles.yaml"
        if not profiles_file.exists():
            return yaml.dump({"profiles": []})
        with open(profiles_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return yaml.dump(data, allow_unicode=True, default_flow_style=False, sort_keys=False)

    @mcp.resource("gangway://validation-rules")
    async def validation_rules() -> str:
        """バリデーションルール定義を取得する。

        カテゴリごとのルールセットを宣言順に返します。
        """
        rules_dir = config_dir / "validation-rules"
        rule_sets: list[dict] = []  # type: ignore[type-arg]
        if rules_dir.exists():
            for rule_file in sorted(rules_dir.glob("*.yaml")):
                with open(rule_file, encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                if data:
                    rule_sets.append(data)
        return yaml.dump({"rule_sets": rule_sets}, allow_unicode=True, default_flow_style=False, sort_keys=False)
