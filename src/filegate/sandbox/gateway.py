"""File gateway executing sandboxed filesystem operations.

Every operation passes through :class:`~filegate.sandbox.policy.SandboxPolicy`
before it reaches the disk. :meth:`FileGateway.handle_operation` never raises:
policy violations, missing input and I/O failures all come back as a failed
:class:`FileResponse`.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from filegate.sandbox.policy import SandboxPolicy

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Access to this directory is not allowed"
EXTENSION_DENIED_MESSAGE = "File type not allowed"
CONTENT_REQUIRED_MESSAGE = "Content is required for write operation"
INVALID_OPERATION_MESSAGE = "Invalid operation type"


class OperationType(str, Enum):
    """Primitive filesystem operations."""

    READ = "read"
    WRITE = "write"
    LIST = "list"
    DELETE = "delete"
    CREATE_DIRECTORY = "createDirectory"


# Directory operations skip the extension check
DIRECTORY_OPERATIONS = frozenset({OperationType.LIST, OperationType.CREATE_DIRECTORY})


class FileErrorKind(str, Enum):
    """Classification of a failed operation."""

    ACCESS_DENIED = "access_denied"
    EXTENSION_DENIED = "extension_denied"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


@dataclass(frozen=True)
class FileOperation:
    """A single request against the gateway.

    ``type`` is kept as the raw string when it is not a known
    :class:`OperationType` so the gateway can reject it.
    """

    type: OperationType | str
    path: str
    content: str | None = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> FileOperation:
        """Build an operation from an untrusted mapping."""
        op_type = raw.get("type", "")
        try:
            op_type = OperationType(op_type)
        except ValueError:
            pass
        content = raw.get("content")
        return cls(
            type=op_type,
            path=str(raw.get("path", "")),
            content=None if content is None else str(content),
        )


@dataclass(frozen=True)
class FileResponse:
    """Uniform result of a gateway operation."""

    success: bool
    data: str | list[str] | None = None
    error: str | None = None
    error_kind: FileErrorKind | None = None

    @classmethod
    def ok(cls, data: str | list[str] | None = None) -> FileResponse:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: FileErrorKind = FileErrorKind.INTERNAL) -> FileResponse:
        return cls(success=False, error=error, error_kind=kind)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result


class FileGateway:
    """Stateless executor of :class:`FileOperation` requests."""

    def __init__(self, policy: SandboxPolicy) -> None:
        self.policy = policy

    async def handle_operation(self, operation: FileOperation) -> FileResponse:
        """Validate and run one operation.

        Args:
            operation: The operation to run

        Returns:
            FileResponse describing the outcome; never raises
        """
        logger.debug("Handling operation %s on %s", operation.type, operation.path)

        try:
            op_type = OperationType(operation.type)
        except ValueError:
            return FileResponse.fail(INVALID_OPERATION_MESSAGE, FileErrorKind.INVALID_INPUT)

        try:
            denied = self._validate(op_type, operation.path)
            if denied is not None:
                return denied

            if op_type is OperationType.WRITE and not operation.content:
                return FileResponse.fail(CONTENT_REQUIRED_MESSAGE, FileErrorKind.INVALID_INPUT)

            target = self.policy.resolve(operation.path)
            return await self._run(op_type, target, operation)
        except FileNotFoundError as e:
            logger.info("Operation %s failed, not found: %s", op_type.value, e)
            return FileResponse.fail(str(e), FileErrorKind.NOT_FOUND)
        except (OSError, ValueError) as e:
            logger.warning("Operation %s on %s failed: %s", op_type.value, operation.path, e)
            return FileResponse.fail(str(e), FileErrorKind.INTERNAL)
        except Exception as e:
            logger.exception("Unexpected error during %s on %s", op_type.value, operation.path)
            return FileResponse.fail(str(e) or "Unknown error occurred", FileErrorKind.INTERNAL)

    def _validate(self, op_type: OperationType, path: str) -> FileResponse | None:
        if not self.policy.is_path_allowed(path):
            logger.info("Denied %s on %s: outside allowed directories", op_type.value, path)
            return FileResponse.fail(ACCESS_DENIED_MESSAGE, FileErrorKind.ACCESS_DENIED)

        if op_type not in DIRECTORY_OPERATIONS and not self.policy.is_extension_allowed(path):
            logger.info("Denied %s on %s: extension not allowed", op_type.value, path)
            return FileResponse.fail(EXTENSION_DENIED_MESSAGE, FileErrorKind.EXTENSION_DENIED)

        return None

    async def _run(self, op_type: OperationType, target: Path, operation: FileOperation) -> FileResponse:
        if op_type is OperationType.READ:
            content = await asyncio.to_thread(target.read_text, encoding="utf-8")
            return FileResponse.ok(content)

        if op_type is OperationType.WRITE:
            await asyncio.to_thread(target.write_text, operation.content, encoding="utf-8")
            return FileResponse.ok()

        if op_type is OperationType.LIST:
            entries = await asyncio.to_thread(os.listdir, target)
            return FileResponse.ok(entries)

        if op_type is OperationType.DELETE:
            await asyncio.to_thread(target.unlink)
            return FileResponse.ok()

        await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        return FileResponse.ok()
