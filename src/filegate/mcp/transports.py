"""MCP transport entry points for running the Filegate MCP server."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

if TYPE_CHECKING:
    from mcp.server import Server

logger = logging.getLogger(__name__)


async def run_stdio_server(server: Server) -> None:
    """Run MCP server over stdio transport.

    Args:
        server: Configured MCP Server instance
    """
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def create_http_app(server: Server) -> Any:
    """Build a Starlette app serving ``server`` at ``/mcp``.

    Args:
        server: Configured MCP Server instance

    Returns:
        ASGI application
    """
    from starlette.applications import Starlette
    from starlette.routing import Mount

    session_manager = StreamableHTTPSessionManager(app=server)

    async def handle_mcp(scope: Any, receive: Any, send: Any) -> None:
        await session_manager.handle_request(scope, receive, send)

    @contextlib.asynccontextmanager
    async def lifespan(app: Any) -> AsyncIterator[None]:
        async with session_manager.run():
            yield

    return Starlette(routes=[Mount("/mcp", app=handle_mcp)], lifespan=lifespan)


async def run_streamable_http_server(
    server: Server,
    host: str = "127.0.0.1",
    port: int = 8200,
) -> None:
    """Run MCP server over Streamable HTTP transport.

    Args:
        server: Configured MCP Server instance
        host: Bind host
        port: Bind port
    """
    import uvicorn

    app = create_http_app(server)

    logger.info("Starting MCP HTTP server on %s:%d", host, port)
    config = uvicorn.Config(app, host=host, port=port, log_level="info")
    server_instance = uvicorn.Server(config)
    await server_instance.serve()
