"""Model Context Protocol (MCP) binding for Filegate.

Provides:
- MCP Server: routes MCP requests to the dispatcher
- Transports: stdio and Streamable HTTP entry points
"""

from filegate.mcp.server import create_mcp_server

__all__ = [
    "create_mcp_server",
]
