"""FastMCPベースのMCPサーバーエントリポイント。"""

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from gangway.config import GangwayConfig
from gangway.resources.rules import register_rule_resources
from gangway.services.validation import ValidationService
from gangway.tools.validation import register_validation_tools


def create_server(config: GangwayConfig | None = None) -> FastMCP:
    """Gangway MCPサーバーを作成し、ツール・リソースを登録する。

    Args:
        config: 設定。Noneの場合はデフォルト設定を使用。

    Returns:
        設定済みのFastMCPインスタンス。
    """
    if config is None:
        config = GangwayConfig()

    mcp = FastMCP("gangway")

    # サービス層
    validation_service = ValidationService(config_dir=config.config_dir, default_profile=config.default_profile)

    # MCPインターフェース登録
    register_validation_tools(mcp, validation_service)
    register_rule_resources(mcp, config.config_dir)

    # ヘルスチェックエンドポイント
    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return mcp
