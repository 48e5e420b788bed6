"""Unit tests for todolist_app.widget."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
import respx

from todolist_app.errors import ErrorCode, TodoAppError
from todolist_app.fetcher import Fetcher
from todolist_app.models.widget import AssetKind
from todolist_app.widget import (
    OAI_STATIC_ORIGIN,
    WidgetAssetResolver,
    extract_widget_files,
    origin_of,
    render_widget_html,
    widget_resource_meta,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from tests.conftest import FakeClock

SOURCE = "https://widget.example.com"

HASHED_INDEX = """<!doctype html>
<html>
  <head>
    <script type="module" crossorigin src="/widget-3f9a1c0b.js"></script>
    <link rel="stylesheet" crossorigin href="/widget-3f9a1c0b.css">
  </head>
  <body><div id="root"></div></body>
</html>"""

PLAIN_INDEX = '<script src="/widget.js"></script><link href="/widget.css" rel="stylesheet">'

# ---------------------------------------------------------------------------
# extract_widget_files
# ---------------------------------------------------------------------------


class TestExtractWidgetFiles:
    def test_hashed_filenames(self) -> None:
        assert extract_widget_files(HASHED_INDEX) == ("widget-3f9a1c0b.js", "widget-3f9a1c0b.css")

    def test_unhashed_filenames(self) -> None:
        assert extract_widget_files(PLAIN_INDEX) == ("widget.js", "widget.css")

    def test_no_matches(self) -> None:
        assert extract_widget_files("<html></html>") == (None, None)

    def test_only_js(self) -> None:
        assert extract_widget_files('<script src="/widget-ab12.js">') == ("widget-ab12.js", None)

    def test_non_hex_hash_not_matched(self) -> None:
        assert extract_widget_files('<script src="/widget-XYZ.js">') == (None, None)

    def test_nested_path_not_matched(self) -> None:
        assert extract_widget_files('<script src="/assets/widget.js">') == (None, None)

    def test_first_match_wins(self) -> None:
        html = '<script src="/widget-aa.js"></script><script src="/widget-bb.js"></script>'
        assert extract_widget_files(html)[0] == "widget-aa.js"


# ---------------------------------------------------------------------------
# WidgetAssetResolver
# ---------------------------------------------------------------------------


@pytest.fixture()
async def fetcher() -> AsyncGenerator[Fetcher, None]:
    async with httpx.AsyncClient() as client:
        yield Fetcher(client)


def _resolver(fetcher: Fetcher, clock: FakeClock, source: str = SOURCE) -> WidgetAssetResolver:
    return WidgetAssetResolver(fetcher, source_url=source, ttl_seconds=60.0, clock=clock)


class TestDiscovery:
    @respx.mock
    async def test_discovers_filenames(self, fetcher: Fetcher, clock: FakeClock) -> None:
        respx.get(f"{SOURCE}/index.html").mock(
            return_value=httpx.Response(200, text=HASHED_INDEX)
        )
        files = await _resolver(fetcher, clock).discover()
        assert files.js == "widget-3f9a1c0b.js"
        assert files.css == "widget-3f9a1c0b.css"
        assert files.discovered_at == clock.now

    @respx.mock
    async def test_within_ttl_no_new_fetch(self, fetcher: Fetcher, clock: FakeClock) -> None:
        route = respx.get(f"{SOURCE}/index.html").mock(
            return_value=httpx.Response(200, text=HASHED_INDEX)
        )
        resolver = _resolver(fetcher, clock)
        await resolver.discover()
        clock.advance(59.9)
        await resolver.discover()
        assert route.call_count == 1

    @respx.mock
    async def test_after_ttl_rediscovers(self, fetcher: Fetcher, clock: FakeClock) -> None:
        route = respx.get(f"{SOURCE}/index.html").mock(
            side_effect=[
                httpx.Response(200, text=HASHED_INDEX),
                httpx.Response(200, text=PLAIN_INDEX),
            ]
        )
        resolver = _resolver(fetcher, clock)
        await resolver.discover()
        clock.advance(60.0)
        files = await resolver.discover()
        assert route.call_count == 2
        assert files.js == "widget.js"
        assert files.css == "widget.css"

    @respx.mock
    async def test_incomplete_discovery_retried_every_time(
        self, fetcher: Fetcher, clock: FakeClock
    ) -> None:
        route = respx.get(f"{SOURCE}/index.html").mock(
            return_value=httpx.Response(200, text='<script src="/widget.js"></script>')
        )
        resolver = _resolver(fetcher, clock)
        await resolver.discover()
        files = await resolver.discover()
        assert route.call_count == 2
        assert files.js == "widget.js"
        assert files.css == ""

    @respx.mock
    async def test_missing_match_keeps_previous_value(
        self, fetcher: Fetcher, clock: FakeClock
    ) -> None:
        respx.get(f"{SOURCE}/index.html").mock(
            side_effect=[
                httpx.Response(200, text=HASHED_INDEX),
                httpx.Response(200, text='<script src="/widget-ffff.js"></script>'),
            ]
        )
        resolver = _resolver(fetcher, clock)
        await resolver.discover()
        clock.advance(61)
        files = await resolver.discover()
        assert files.js == "widget-ffff.js"
        assert files.css == "widget-3f9a1c0b.css"

    @respx.mock
    async def test_failure_keeps_cached_files(self, fetcher: Fetcher, clock: FakeClock) -> None:
        route = respx.get(f"{SOURCE}/index.html").mock(
            side_effect=[
                httpx.Response(200, text=HASHED_INDEX),
                httpx.ConnectError("Connection refused"),
                httpx.Response(200, text=HASHED_INDEX),
            ]
        )
        resolver = _resolver(fetcher, clock)
        first = await resolver.discover()
        discovered_at = first.discovered_at
        clock.advance(120)

        files = await resolver.discover()
        assert files.js == "widget-3f9a1c0b.js"
        assert files.css == "widget-3f9a1c0b.css"
        assert files.discovered_at == discovered_at

        # The failure is not cached: the next call tries again
        await resolver.discover()
        assert route.call_count == 3

    @respx.mock
    async def test_http_error_status_is_a_failure(
        self, fetcher: Fetcher, clock: FakeClock
    ) -> None:
        respx.get(f"{SOURCE}/index.html").mock(return_value=httpx.Response(503))
        files = await _resolver(fetcher, clock).discover()
        assert files.js == ""
        assert files.discovered_at is None

    async def test_no_source_url_skips_fetch(self, fetcher: Fetcher, clock: FakeClock) -> None:
        with respx.mock(assert_all_called=False) as mock:
            route = mock.get(url__regex=r".*").mock(return_value=httpx.Response(200))
            files = await _resolver(fetcher, clock, source="").discover()
            assert route.call_count == 0
        assert files.js == ""
        assert files.css == ""

    @respx.mock
    async def test_trailing_slash_in_source_url(self, fetcher: Fetcher, clock: FakeClock) -> None:
        route = respx.get(f"{SOURCE}/index.html").mock(
            return_value=httpx.Response(200, text=HASHED_INDEX)
        )
        await _resolver(fetcher, clock, source=f"{SOURCE}/").discover()
        assert route.call_count == 1


class TestFetchAsset:
    @respx.mock
    async def test_relays_bytes(self, fetcher: Fetcher, clock: FakeClock) -> None:
        respx.get(f"{SOURCE}/index.html").mock(
            return_value=httpx.Response(200, text=HASHED_INDEX)
        )
        respx.get(f"{SOURCE}/widget-3f9a1c0b.css").mock(
            return_value=httpx.Response(200, content=b"body{color:red}")
        )
        body = await _resolver(fetcher, clock).fetch_asset(AssetKind.CSS)
        assert body == b"body{color:red}"

    @respx.mock
    async def test_returns_none_when_never_discovered(
        self, fetcher: Fetcher, clock: FakeClock
    ) -> None:
        respx.get(f"{SOURCE}/index.html").mock(return_value=httpx.Response(200, text="<html/>"))
        assert await _resolver(fetcher, clock).fetch_asset(AssetKind.JS) is None

    @respx.mock
    async def test_relay_failure_raises(self, fetcher: Fetcher, clock: FakeClock) -> None:
        respx.get(f"{SOURCE}/index.html").mock(
            return_value=httpx.Response(200, text=HASHED_INDEX)
        )
        respx.get(f"{SOURCE}/widget-3f9a1c0b.js").mock(return_value=httpx.Response(500))
        with pytest.raises(TodoAppError) as exc_info:
            await _resolver(fetcher, clock).fetch_asset(AssetKind.JS)
        assert exc_info.value.code == ErrorCode.WIDGET_FETCH_FAILED


# ---------------------------------------------------------------------------
# Widget resource
# ---------------------------------------------------------------------------


class TestWidgetResource:
    def test_html_references_backend_assets(self) -> None:
        html = render_widget_html("https://todo.example.com/")
        assert html.startswith("<!DOCTYPE html>")
        assert '<link rel="stylesheet" href="https://todo.example.com/widget.css">' in html
        assert '<script type="module" src="https://todo.example.com/widget.js"></script>' in html
        assert '<div id="root"></div>' in html

    def test_html_without_backend_uses_root_relative_paths(self) -> None:
        html = render_widget_html("")
        assert 'href="/widget.css"' in html
        assert 'src="/widget.js"' in html

    def test_meta_csp_includes_backend_origin(self) -> None:
        meta = widget_resource_meta("https://todo.example.com/some/path")
        csp = meta["openai/widgetCSP"]
        assert csp["connect_domains"] == ["https://chatgpt.com"]
        assert csp["resource_domains"] == ["https://todo.example.com", OAI_STATIC_ORIGIN]
        assert meta["openai/widgetPrefersBorder"] is True
        assert meta["openai/widgetDomain"] == "https://chatgpt.com"

    def test_meta_without_backend_drops_empty_domain(self) -> None:
        csp = widget_resource_meta("")["openai/widgetCSP"]
        assert csp["resource_domains"] == [OAI_STATIC_ORIGIN]

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://todo.example.com", "https://todo.example.com"),
            ("https://todo.example.com:8443/x?y=1", "https://todo.example.com:8443"),
            ("not a url", ""),
            ("", ""),
        ],
    )
    def test_origin_of(self, url: str, expected: str) -> None:
        assert origin_of(url) == expected
