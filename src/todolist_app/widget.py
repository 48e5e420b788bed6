"""Widget bundle discovery, relay, and the widget HTML resource.

The widget is built and hosted on a separate static site whose ``index.html``
references the current bundle through root-relative, optionally
content-hashed filenames::

    <script type="module" src="/widget-3f9a1c.js"></script>
    <link rel="stylesheet" href="/widget-3f9a1c.css">

That markup shape is the whole contract with the widget site. The resolver
scrapes the two filenames, caches them for ``cache_ttl_seconds``, and relays
the asset bytes so the host client loads them from this server's origin.
"""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import structlog

from todolist_app.errors import TodoAppError
from todolist_app.models.widget import AssetKind, WidgetFiles

if TYPE_CHECKING:
    from collections.abc import Callable

    from todolist_app.protocols import FetcherProtocol

log = structlog.get_logger()

WIDGET_URI = "ui://widget/widget.html"
WIDGET_MIME_TYPE = "text/html+skybridge"
CHATGPT_ORIGIN = "https://chatgpt.com"
OAI_STATIC_ORIGIN = "https://persistent.oaistatic.com"

_JS_PATTERN = re.compile(r'src="/(widget(?:-[a-f0-9]+)?\.js)"')
_CSS_PATTERN = re.compile(r'href="/(widget(?:-[a-f0-9]+)?\.css)"')


def extract_widget_files(html: str) -> tuple[str | None, str | None]:
    """Return the (js, css) filenames referenced by ``html``; ``None`` where absent."""
    js_match = _JS_PATTERN.search(html)
    css_match = _CSS_PATTERN.search(html)
    return (
        js_match.group(1) if js_match else None,
        css_match.group(1) if css_match else None,
    )


class WidgetAssetResolver:
    """TTL-cached discovery of the widget bundle plus byte relay.

    A failed discovery keeps whatever was cached before and is retried on the
    next request; failures are never cached.
    """

    def __init__(
        self,
        fetcher: FetcherProtocol,
        source_url: str,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._source_url = source_url.rstrip("/")
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._files = WidgetFiles()

    @property
    def files(self) -> WidgetFiles:
        return self._files

    def _is_fresh(self) -> bool:
        files = self._files
        if not (files.js and files.css) or files.discovered_at is None:
            return False
        return self._clock() - files.discovered_at < self._ttl_seconds

    async def discover(self) -> WidgetFiles:
        """Refresh the cached filenames unless they are complete and within the TTL."""
        if self._is_fresh():
            return self._files

        if not self._source_url:
            log.debug("widget_discovery_skipped", reason="source_url_not_set")
            return self._files

        index_url = f"{self._source_url}/index.html"
        try:
            html = await self._fetcher.fetch_text(index_url)
        except TodoAppError as exc:
            log.warning("widget_discovery_failed", url=index_url, message=exc.message)
            return self._files

        js, css = extract_widget_files(html)
        if js:
            self._files.js = js
        if css:
            self._files.css = css
        self._files.discovered_at = self._clock()

        log.info("widget_files_discovered", js=self._files.js, css=self._files.css)
        return self._files

    async def fetch_asset(self, kind: AssetKind) -> bytes | None:
        """Return the asset bytes, or ``None`` if its filename was never discovered.

        Raises TodoAppError when the relay fetch fails.
        """
        files = await self.discover()
        filename = files.filename_for(kind)
        if not filename:
            return None
        return await self._fetcher.fetch_bytes(f"{self._source_url}/{filename}")


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` for ``url``, or ``""`` if it has none."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def render_widget_html(backend_url: str) -> str:
    """HTML shell the host client renders; the bundle is loaded via this server."""
    base = backend_url.rstrip("/")
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Widget</title>
<link rel="stylesheet" href="{base}/widget.css">
</head>
<body>
<div id="root"></div>
<script type="module" src="{base}/widget.js"></script>
</body>
</html>"""


def widget_resource_meta(backend_url: str) -> dict[str, Any]:
    """``_meta`` attached to the widget resource contents."""
    resource_domains = [d for d in (origin_of(backend_url), OAI_STATIC_ORIGIN) if d]
    return {
        "openai/widgetPrefersBorder": True,
        "openai/widgetDomain": CHATGPT_ORIGIN,
        "openai/widgetCSP": {
            "connect_domains": [CHATGPT_ORIGIN],
            "resource_domains": resource_domains,
        },
        "openai/widgetDescription": (
            "Interactive todolist widget with theme support and task management"
        ),
    }
