"""Filegate - Sandboxed filesystem gateway for Model Context Protocol clients.

Filegate exposes a directory tree to MCP clients through three capability
families: resources (readable files), tools (file operations) and prompts
(JSON-defined message templates). Every filesystem access passes through an
allow-list of directories and extensions and fails closed.

Key modules:

- :mod:`filegate.sandbox` - Sandbox policy and the file gateway
- :mod:`filegate.capabilities` - Resource, tool and prompt managers
- :mod:`filegate.dispatcher` - Request routing and configuration lifecycle
- :mod:`filegate.mcp` - MCP server binding and transports
- :mod:`filegate.config` - YAML configuration loading and validation
"""

__version__ = "0.3.1"
