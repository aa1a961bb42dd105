"""Gangwayの設定管理。"""

from pathlib import Path

from pydantic_settings import BaseSettings

_PACKAGE_ROOT = Path(__file__).parent


class GangwayConfig(BaseSettings):
    """Gangway設定。環境変数から読み込み可能。"""

    model_config = {"env_prefix": "GANGWAY_"}

    # ルールセット・プロファイル定義はパッケージに同梱する
    config_dir: Path = _PACKAGE_ROOT / "data"
    default_profile: str = "app-store"

    # ログ（レポート本文はstdout、ログはstderr）
    log_level: str = "WARNING"
    log_json: bool = False

    # MCPサーバー
    host: str = "0.0.0.0"
    port: int = 8000
    url_token: str = ""
