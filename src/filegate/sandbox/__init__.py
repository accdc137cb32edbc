"""Sandboxed filesystem access.

- :class:`SandboxPolicy` - directory and extension allow-list predicates
- :class:`FileGateway` - runs read/write/list/delete/createDirectory after policy checks
"""

from filegate.sandbox.gateway import (
    FileErrorKind,
    FileGateway,
    FileOperation,
    FileResponse,
    OperationType,
)
from filegate.sandbox.policy import SandboxPolicy

__all__ = [
    "FileErrorKind",
    "FileGateway",
    "FileOperation",
    "FileResponse",
    "OperationType",
    "SandboxPolicy",
]
