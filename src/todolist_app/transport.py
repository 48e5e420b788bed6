"""Streamable HTTP transport: ASGI middleware and the uvicorn runner."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse, Response

if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from todolist_app.config import Settings

log = structlog.get_logger()

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"


def is_origin_allowed(origin: str, allowed_origins: frozenset[str]) -> bool:
    """Exact matches, plus the per-app sandbox iframes ChatGPT serves widgets from."""
    if origin in allowed_origins:
        return True
    return "chatgpt-com" in origin and "oaiusercontent.com" in origin


class WidgetCORSMiddleware:
    """Pure ASGI middleware adding CORS headers for the host chat client.

    Every HTTP response advertises the allowed methods and headers. The
    request's Origin is reflected only when it belongs to the host client.
    OPTIONS requests are answered here with an empty 200.

    Implemented as pure ASGI (not BaseHTTPMiddleware) so that streaming
    responses are never buffered by the middleware layer.
    """

    def __init__(self, app: ASGIApp, *, allowed_origins: Iterable[str]) -> None:
        self.app = app
        self.allowed_origins = frozenset(allowed_origins)

    def _cors_headers(self, origin: str) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }
        if origin and is_origin_allowed(origin, self.allowed_origins):
            headers["Access-Control-Allow-Origin"] = origin
        return headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin", "")
        cors_headers = self._cors_headers(origin)

        if scope["method"] == "OPTIONS":
            await Response(status_code=200, headers=cors_headers)(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for key, value in cors_headers.items():
                    headers[key] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)


class MCPErrorGuard:
    """Wraps the MCP endpoint so a crash becomes a 500 JSON error.

    The error body is only sent if the transport has not started a response
    yet; otherwise the exception propagates and the connection is dropped.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception:
            log.error("mcp_request_error", response_started=response_started, exc_info=True)
            if response_started:
                # Too late for an error body; let the server drop the connection
                raise
            await JSONResponse({"error": "Internal server error"}, status_code=500)(
                scope, receive, send
            )


def run_http_server(app: ASGIApp, settings: Settings) -> None:
    """Serve the application with uvicorn."""
    log.info(
        "http_server_listening",
        host=settings.server.host,
        port=settings.server.port,
        backend_url=settings.widget.backend_url,
        widget_source=settings.widget.source_url,
    )
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )
