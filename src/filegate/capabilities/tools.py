"""Fixed catalog of file tools.

The four tools are compiled-in constants; nothing is discovered from the
``tools/`` directory, which only has to exist. Tool failures are returned as
data (``isError: True``), never raised to the caller.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from filegate.capabilities.base import ChangeNotifier, Unsubscribe, ensure_directory
from filegate.capabilities.tool_schema import ToolAnnotations, ToolParameter, ToolSchema
from filegate.errors import CapabilityError, internal_error, invalid_params
from filegate.sandbox.gateway import FileGateway, FileOperation, FileResponse, OperationType

logger = logging.getLogger(__name__)

TOOLS_DIR = "tools"

ToolResult = dict[str, Any]
ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]


def _path_param(description: str) -> ToolParameter:
    return ToolParameter(name="path", type="string", description=description)


TOOL_CATALOG: tuple[ToolSchema, ...] = (
    ToolSchema(
        name="readFile",
        description="Read a file from the filesystem",
        parameters=[_path_param("Path to the file to read")],
        annotations=ToolAnnotations(read_only=True),
    ),
    ToolSchema(
        name="writeFile",
        description="Write content to a file",
        parameters=[
            _path_param("Path to the file to write"),
            ToolParameter(name="content", type="string", description="Content to write to the file"),
        ],
        annotations=ToolAnnotations(destructive=True),
    ),
    ToolSchema(
        name="listDirectory",
        description="List contents of a directory",
        parameters=[_path_param("Path to the directory to list")],
        annotations=ToolAnnotations(read_only=True),
    ),
    ToolSchema(
        name="deleteFile",
        description="Delete a file from the filesystem",
        parameters=[_path_param("Path to the file to delete")],
        annotations=ToolAnnotations(destructive=True),
    ),
)


def text_result(text: str, is_error: bool = False) -> ToolResult:
    """Wrap text as a single-item tool result."""
    result: ToolResult = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


class ToolManager:
    """Runs the file tools against the gateway."""

    name = "tools"
    directory = TOOLS_DIR

    def __init__(self, gateway: FileGateway) -> None:
        self.gateway = gateway
        self._schemas = {schema.name: schema for schema in TOOL_CATALOG}
        self._handlers: dict[str, ToolHandler] = {
            "readFile": self._read_file,
            "writeFile": self._write_file,
            "listDirectory": self._list_directory,
            "deleteFile": self._delete_file,
        }
        self._list_changed: ChangeNotifier[Callable[[], None]] = ChangeNotifier()

    async def initialize(self) -> None:
        await ensure_directory(self.gateway, self.directory, self.name)

    async def cleanup(self) -> None:
        pass

    async def list_tools(self, cursor: str | None = None) -> dict[str, list[ToolSchema]]:
        return {"tools": list(TOOL_CATALOG)}

    async def execute_tool(self, name: str, params: dict[str, Any] | None = None) -> ToolResult:
        """Execute a tool by name.

        Args:
            name: One of the catalog tool names
            params: Tool arguments

        Returns:
            ``{"content": [...]}`` on success, ``{"content": [...], "isError": True}`` on failure
        """
        args = params or {}
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise internal_error(f"Unknown tool: {name}")
            self._check_required(self._schemas[name], args)
            return await handler(args)
        except CapabilityError as e:
            logger.warning("Tool %s failed: %s", name, e.message)
            return text_result(e.message, is_error=True)
        except Exception as e:
            logger.error("Tool %s failed unexpectedly: %s", name, e)
            return text_result(str(e) or "Unknown error occurred", is_error=True)

    def on_tool_list_changed(self, callback: Callable[[], None]) -> Unsubscribe:
        return self._list_changed.subscribe(callback)

    @staticmethod
    def _check_required(schema: ToolSchema, args: dict[str, Any]) -> None:
        for param in schema.required:
            if args.get(param) is None:
                raise invalid_params(f"Missing required parameter: {param}")

    async def _run(self, op_type: OperationType, args: dict[str, Any], verb: str) -> tuple[str, FileResponse]:
        path = str(args["path"])
        content = args.get("content")
        operation = FileOperation(op_type, path, None if content is None else str(content))
        result = await self.gateway.handle_operation(operation)
        if not result.success:
            raise internal_error(f"Failed to {verb}: {path} ({result.error})")
        return path, result

    async def _read_file(self, args: dict[str, Any]) -> ToolResult:
        _, result = await self._run(OperationType.READ, args, "read file")
        return text_result(result.data or "")

    async def _write_file(self, args: dict[str, Any]) -> ToolResult:
        path, _ = await self._run(OperationType.WRITE, args, "write file")
        return text_result(f"Successfully wrote to file: {path}")

    async def _list_directory(self, args: dict[str, Any]) -> ToolResult:
        _, result = await self._run(OperationType.LIST, args, "list directory")
        return text_result(json.dumps(result.data or [], indent=2))

    async def _delete_file(self, args: dict[str, Any]) -> ToolResult:
        path, _ = await self._run(OperationType.DELETE, args, "delete file")
        return text_result(f"Successfully deleted file: {path}")
