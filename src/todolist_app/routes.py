"""Plain HTTP routes served next to the MCP endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.responses import JSONResponse, Response

from todolist_app.errors import TodoAppError
from todolist_app.models.widget import AssetKind

if TYPE_CHECKING:
    from starlette.requests import Request

    from todolist_app.state import AppState

log = structlog.get_logger()


async def health(request: Request) -> Response:
    return JSONResponse({"status": "ok"})


async def widget_css(request: Request) -> Response:
    return await _serve_asset(request.app.state.app_state, AssetKind.CSS)


async def widget_js(request: Request) -> Response:
    return await _serve_asset(request.app.state.app_state, AssetKind.JS)


async def _serve_asset(state: AppState, kind: AssetKind) -> Response:
    """Relay a widget asset, or a comment placeholder of the same content type."""
    if state.widget_assets is None:
        raise RuntimeError("Widget asset resolver not initialized")

    try:
        body = await state.widget_assets.fetch_asset(kind)
    except TodoAppError as exc:
        log.error("widget_asset_fetch_failed", kind=kind, code=exc.code, message=exc.message)
        return Response(kind.error_placeholder, status_code=500, media_type=kind.content_type)

    if body is None:
        log.info("widget_asset_not_discovered", kind=kind)
        return Response(kind.missing_placeholder, status_code=404, media_type=kind.content_type)

    return Response(body, media_type=kind.content_type)
