"""Capability managers exposed to MCP clients.

Each manager owns one directory under the workspace root and follows the
:class:`~filegate.capabilities.base.CapabilityManager` lifecycle:

- **resources** - files in ``resources/`` exposed as readable resources
- **tools** - readFile, writeFile, listDirectory, deleteFile
- **prompts** - JSON prompt definitions in ``prompts/`` rendered with arguments
"""

from filegate.capabilities.base import CapabilityManager, ChangeNotifier
from filegate.capabilities.prompts import PromptManager
from filegate.capabilities.resources import ResourceManager
from filegate.capabilities.tools import ToolManager

__all__ = [
    "CapabilityManager",
    "ChangeNotifier",
    "PromptManager",
    "ResourceManager",
    "ToolManager",
]
