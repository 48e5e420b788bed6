"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build the process-wide AppState
- Register tools and the widget resource
- Assemble the Starlette app (HTTP) or run over stdio
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Annotated, Any

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from mcp.types import CallToolResult, TextContent, ToolAnnotations
from pydantic import Field
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import Route

import todolist_app.tools.add_todo as t_add
import todolist_app.tools.clear_completed as t_clear
import todolist_app.tools.delete_todo as t_delete
import todolist_app.tools.get_todos as t_get
import todolist_app.tools.toggle_todo as t_toggle
from todolist_app import __version__, routes
from todolist_app.config import Settings
from todolist_app.errors import TodoAppError
from todolist_app.fetcher import Fetcher, build_http_client
from todolist_app.state import AppState
from todolist_app.store import TodoStore
from todolist_app.transport import MCPErrorGuard, WidgetCORSMiddleware, run_http_server
from todolist_app.widget import (
    WIDGET_MIME_TYPE,
    WIDGET_URI,
    WidgetAssetResolver,
    render_widget_html,
    widget_resource_meta,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable

    from todolist_app.models.tools import ToolOutput

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _warn_missing_widget_urls(settings: Settings) -> None:
    if not settings.widget.source_url:
        log.warning(
            "widget_source_url_not_set",
            message="WIDGET_URL not set, widget bundle will not load.",
        )
    if not settings.widget.backend_url:
        log.warning(
            "widget_backend_url_not_set",
            message="RENDER_EXTERNAL_URL not set, widget files will not load properly.",
        )


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


def build_state(settings: Settings) -> AppState:
    """Create the shared store, HTTP client and widget resolver."""
    http_client = build_http_client(settings.widget)
    fetcher = Fetcher(http_client)
    return AppState(
        settings=settings,
        store=TodoStore(),
        http_client=http_client,
        widget_assets=WidgetAssetResolver(
            fetcher,
            source_url=settings.widget.source_url,
            ttl_seconds=settings.widget.cache_ttl_seconds,
        ),
    )


# ---------------------------------------------------------------------------
# Tool result serialisation
# ---------------------------------------------------------------------------


def _serialise_tool_error(error: TodoAppError) -> CallToolResult:
    """Convert a TodoAppError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


def _serialise_tool_output(output: ToolOutput) -> CallToolResult:
    """Text for the model, preview for the widget, full list under _meta."""
    return CallToolResult.model_validate(
        {
            "content": [{"type": "text", "text": output.text}],
            "structuredContent": output.structured_content,
            "_meta": {"fullData": output.full_data},
        }
    )


async def _run_tool(tool: str, call: Awaitable[ToolOutput]) -> CallToolResult:
    try:
        output = await call
    except TodoAppError as exc:
        log.warning(
            "tool_error",
            tool=tool,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool=tool, exc_info=True)
        raise
    return _serialise_tool_output(output)


def _tool_meta(invoking: str, invoked: str, *, read_only: bool) -> dict[str, Any]:
    return {
        "openai/outputTemplate": WIDGET_URI,
        "openai/toolInvocation/invoking": invoking,
        "openai/toolInvocation/invoked": invoked,
        "openai/widgetAccessible": True,
        "openai/resultCanProduceWidget": True,
        "openai/readOnlyHint": read_only,
    }


# ---------------------------------------------------------------------------
# FastMCP instance, tool and resource registration
# ---------------------------------------------------------------------------


def build_server(state: AppState) -> FastMCP:
    """Create the FastMCP server bound to ``state``."""

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
        # Entered once per request in stateless HTTP mode: hand out the
        # process-wide state, never create or tear down anything here.
        yield state

    settings = state.settings
    mcp = FastMCP(
        "todolist-app",
        lifespan=lifespan,
        host=settings.server.host,
        port=settings.server.port,
        stateless_http=True,
        json_response=True,
        # Served on a public hostname; origin handling is done by WidgetCORSMiddleware
        transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
    )
    # FastMCP doesn't expose a version kwarg, so set it on the underlying Server
    # so the MCP initialize handshake reports our version, not the SDK's.
    mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]

    backend_url = settings.widget.backend_url

    @mcp.resource(
        WIDGET_URI,
        name="widget-html",
        mime_type=WIDGET_MIME_TYPE,
        meta=widget_resource_meta(backend_url),
    )
    def widget_html() -> str:
        """HTML shell for the todo list widget."""
        return render_widget_html(backend_url)

    @mcp.tool(
        title="Get Todos",
        annotations=ToolAnnotations(
            readOnlyHint=True, destructiveHint=False, openWorldHint=False
        ),
        meta=_tool_meta("Loading todos...", "Todos loaded successfully", read_only=True),
    )
    async def get_todos(ctx: Context) -> CallToolResult:
        """Retrieve all todo items from the list."""
        app_state: AppState = ctx.request_context.lifespan_context
        return await _run_tool("get_todos", t_get.handle(app_state))

    @mcp.tool(
        title="Add Todo",
        annotations=ToolAnnotations(
            readOnlyHint=False, destructiveHint=False, openWorldHint=False
        ),
        meta=_tool_meta("Adding todo...", "Todo added successfully", read_only=False),
    )
    async def add_todo(
        title: Annotated[str, Field(description="The title/description of the todo item")],
        ctx: Context,
    ) -> CallToolResult:
        """Add a new todo item to the list."""
        app_state: AppState = ctx.request_context.lifespan_context
        return await _run_tool("add_todo", t_add.handle(title, app_state))

    @mcp.tool(
        title="Toggle Todo",
        annotations=ToolAnnotations(
            readOnlyHint=False, destructiveHint=False, openWorldHint=False
        ),
        meta=_tool_meta("Toggling todo...", "Todo toggled successfully", read_only=False),
    )
    async def toggle_todo(
        id: Annotated[str, Field(description="The ID of the todo item to toggle")],  # noqa: A002
        ctx: Context,
    ) -> CallToolResult:
        """Mark a todo as completed or uncompleted."""
        app_state: AppState = ctx.request_context.lifespan_context
        return await _run_tool("toggle_todo", t_toggle.handle(id, app_state))

    @mcp.tool(
        title="Delete Todo",
        annotations=ToolAnnotations(
            readOnlyHint=False, destructiveHint=True, openWorldHint=False
        ),
        meta=_tool_meta("Deleting todo...", "Todo deleted successfully", read_only=False),
    )
    async def delete_todo(
        id: Annotated[str, Field(description="The ID of the todo item to delete")],  # noqa: A002
        ctx: Context,
    ) -> CallToolResult:
        """Delete a todo item from the list."""
        app_state: AppState = ctx.request_context.lifespan_context
        return await _run_tool("delete_todo", t_delete.handle(id, app_state))

    @mcp.tool(
        title="Clear Completed Todos",
        annotations=ToolAnnotations(
            readOnlyHint=False, destructiveHint=True, openWorldHint=False
        ),
        meta=_tool_meta("Clearing completed todos...", "Completed todos cleared", read_only=False),
    )
    async def clear_completed(ctx: Context) -> CallToolResult:
        """Remove all completed todo items from the list."""
        app_state: AppState = ctx.request_context.lifespan_context
        return await _run_tool("clear_completed", t_clear.handle(app_state))

    return mcp


# ---------------------------------------------------------------------------
# HTTP application
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> Starlette:
    """Assemble the Starlette app: MCP endpoint, widget proxy, health check."""
    settings = settings or Settings()
    state = build_state(settings)
    mcp = build_server(state)

    # Creates the stateless session manager: a fresh transport per POST /mcp
    mcp.streamable_http_app()
    session_manager = mcp.session_manager

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        async with session_manager.run():
            log.info(
                "server_started",
                version=__version__,
                transport="http",
                widget_source=settings.widget.source_url,
            )
            try:
                yield
            finally:
                if state.http_client is not None:
                    await state.http_client.aclose()
                log.info("server_stopping")

    app = Starlette(
        routes=[
            Route("/health", routes.health, methods=["GET"]),
            Route("/widget.css", routes.widget_css, methods=["GET"]),
            Route("/widget.js", routes.widget_js, methods=["GET"]),
            Route(
                mcp.settings.streamable_http_path,
                endpoint=MCPErrorGuard(session_manager.handle_request),
                methods=["POST"],
            ),
        ],
        middleware=[
            Middleware(WidgetCORSMiddleware, allowed_origins=settings.cors.allowed_origins),
        ],
        lifespan=lifespan,
    )
    app.state.app_state = state
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def _run_stdio(settings: Settings) -> None:
    state = build_state(settings)
    mcp = build_server(state)
    log.info("server_started", version=__version__, transport="stdio")
    try:
        await mcp.run_stdio_async()
    finally:
        if state.http_client is not None:
            await state.http_client.aclose()
        log.info("server_stopping")


def main() -> None:
    settings = Settings()
    _setup_logging(settings)
    _warn_missing_widget_urls(settings)

    if settings.server.transport == "http":
        run_http_server(create_app(settings), settings)
        return

    asyncio.run(_run_stdio(settings))


if __name__ == "__main__":
    main()
