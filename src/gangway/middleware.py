"""MCPエンドポイントのトークン認証。"""

import hmac

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

TOKEN_HEADER = "X-Gangway-Token"
TOKEN_QUERY_PARAM = "token"


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """MCPエンドポイント（/mcp 配下）にだけ共有トークンを要求する。

    run_validation は任意のパスを読み取れるため、公開環境では
    GANGWAY_URL_TOKEN を設定すること。トークンは X-Gangway-Token ヘッダー
    または token クエリパラメータで渡す。/health などMCP以外のパスは
    トークンなしで通す。トークン未設定の場合は認証しない。
    """

    def __init__(self, app: ASGIApp, url_token: str = "", protected_prefix: str = "/mcp") -> None:
        super().__init__(app)
        self.url_token = url_token
        self.protected_prefix = protected_prefix.rstrip("/")

    def _is_protected(self, path: str) -> bool:
        return path == self.protected_prefix or path.startswith(self.protected_prefix + "/")

    def _presented_token(self, request: Request) -> str:
        return request.headers.get(TOKEN_HEADER) or request.query_params.get(TOKEN_QUERY_PARAM, "")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.url_token or not self._is_protected(request.url.path):
            return await call_next(request)

        if not hmac.compare_digest(self._presented_token(request).encode(), self.url_token.encode()):
            return JSONResponse(
                {"error": "Unauthorized", "message": f"Invalid or missing token ({TOKEN_HEADER} header or ?token=)"},
                status_code=401,
            )
        return await call_next(request)
