"""MCP Server exposing the dispatcher to external clients."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import AnyUrl

from filegate import __version__
from filegate.dispatcher import Dispatcher, RequestKind
from filegate.errors import CapabilityError
from filegate.mcp.converters import (
    to_mcp_prompt,
    to_mcp_resource,
    to_mcp_resource_template,
    to_mcp_tool,
    to_prompt_messages,
    to_text_contents,
)

logger = logging.getLogger(__name__)


class ToolExecutionError(Exception):
    """Raised to make the SDK report a tool result with ``isError``."""


def create_mcp_server(dispatcher: Dispatcher, server_name: str | None = None) -> Server:
    """Create an MCP Server backed by ``dispatcher``.

    Args:
        dispatcher: Configured (or later configured) dispatcher
        server_name: Name for the MCP server (defaults to the dispatcher's)

    Returns:
        Configured MCP Server instance
    """
    server: Server = Server(server_name or dispatcher.server_name, version=__version__)

    async def call(kind: RequestKind, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            return await dispatcher.dispatch(kind, params)
        except CapabilityError as e:
            logger.error("[MCP Error] %s: %s", kind.value, e.message)
            raise e.to_mcp_error() from e

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        result = await call(RequestKind.LIST_TOOLS)
        return [to_mcp_tool(tool) for tool in result["tools"]]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        result = await call(RequestKind.CALL_TOOL, {"name": name, "arguments": arguments or {}})
        contents = to_text_contents(result)
        if result.get("isError"):
            raise ToolExecutionError("\n".join(c.text for c in contents) or f"Error executing {name}")
        return contents

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        result = await call(RequestKind.LIST_RESOURCES)
        return [to_mcp_resource(resource) for resource in result["resources"]]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        result = await call(RequestKind.READ_RESOURCE, {"uri": str(uri)})
        return [
            ReadResourceContents(content=item["text"], mime_type=item.get("mimeType"))
            for item in result["contents"]
        ]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        result = await call(RequestKind.LIST_RESOURCE_TEMPLATES)
        return [to_mcp_resource_template(t) for t in result["resourceTemplates"]]

    @server.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        result = await call(RequestKind.LIST_PROMPTS)
        return [to_mcp_prompt(prompt) for prompt in result["prompts"]]

    @server.get_prompt()
    async def get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
        result = await call(RequestKind.GET_PROMPT, {"name": name, "arguments": arguments})
        return types.GetPromptResult(
            description=result["description"],
            messages=to_prompt_messages(result["messages"]),
        )

    return server
