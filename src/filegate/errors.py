"""Error codes and the exception raised by capability managers.

Codes follow JSON-RPC 2.0 so that a :class:`CapabilityError` maps directly
onto an MCP error response.
"""

from enum import Enum
from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import ErrorData


class ErrorCode(int, Enum):
    """JSON-RPC 2.0 and Filegate-specific error codes."""

    # Standard JSON-RPC 2.0 errors
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Filegate-specific errors (-32000 to -32099)
    NOT_CONFIGURED = -32002


class CapabilityError(Exception):
    """Fatal error raised by a capability manager or the dispatcher."""

    def __init__(self, code: ErrorCode, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __repr__(self) -> str:
        return f"CapabilityError({self.code.name}, {self.message!r})"

    def to_error_data(self) -> ErrorData:
        """Convert to the MCP SDK error payload."""
        return ErrorData(code=self.code.value, message=self.message, data=self.data)

    def to_mcp_error(self) -> McpError:
        """Convert to the exception the MCP SDK turns into an error response."""
        return McpError(self.to_error_data())


def internal_error(message: str, data: Any = None) -> CapabilityError:
    """Helper to create an INTERNAL_ERROR."""
    return CapabilityError(ErrorCode.INTERNAL_ERROR, message, data)


def invalid_params(message: str) -> CapabilityError:
    """Helper to create an INVALID_PARAMS error."""
    return CapabilityError(ErrorCode.INVALID_PARAMS, message)
