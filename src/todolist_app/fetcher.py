"""HTTP fetcher for the widget bundle.

All upstream I/O goes through a single Fetcher instance. The Fetcher
receives an httpx.AsyncClient via constructor injection; whoever builds the
AppState owns the client lifecycle. Upstream URLs come from configuration
only, never from request input, so redirects are followed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from todolist_app import __version__
from todolist_app.errors import ErrorCode, TodoAppError

if TYPE_CHECKING:
    from todolist_app.config import WidgetSettings

log = structlog.get_logger()


def build_http_client(settings: WidgetSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.fetch_timeout_seconds),
        headers={"User-Agent": f"todolist-app/{__version__}"},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


class Fetcher:
    """Thin GET wrapper that turns every upstream failure into TodoAppError."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch_text(self, url: str) -> str:
        response = await self._get(url)
        return response.text

    async def fetch_bytes(self, url: str) -> bytes:
        response = await self._get(url)
        return response.content

    async def _get(self, url: str) -> httpx.Response:
        """GET ``url``; raises TodoAppError on network errors and non-2xx responses."""
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise TodoAppError(
                code=ErrorCode.WIDGET_FETCH_FAILED,
                message=f"Network error fetching {url}: {exc}",
                suggestion="The widget host may be temporarily unavailable.",
                recoverable=True,
            ) from exc

        if not response.is_success:
            raise TodoAppError(
                code=ErrorCode.WIDGET_FETCH_FAILED,
                message=f"HTTP {response.status_code} fetching {url}",
                suggestion="Check that the widget site is deployed and WIDGET_URL is correct.",
                recoverable=response.status_code >= 500,
            )

        log.info(
            "fetch_complete",
            url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response
