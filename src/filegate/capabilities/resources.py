"""File-backed resources.

Resources are not registered anywhere: every call to
:meth:`ResourceManager.list_resources` or :meth:`ResourceManager.read_resource`
looks at the ``resources/`` directory as it is right now.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import quote, unquote

from filegate.capabilities.base import ChangeNotifier, Unsubscribe, ensure_directory
from filegate.errors import internal_error
from filegate.sandbox.gateway import FileGateway, FileOperation, OperationType
from filegate.sandbox.policy import extension_of

logger = logging.getLogger(__name__)

RESOURCES_DIR = "resources"
URI_SCHEME = "file://"

# Placeholder kept in otherwise empty directories
PLACEHOLDER_FILENAME = ".gitkeep"

DEFAULT_MIME_TYPE = "application/octet-stream"
MIME_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "json": "application/json",
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "ts": "application/typescript",
    "md": "text/markdown",
}


def mime_type_for(path: str) -> str:
    """Look up the MIME type for a path by extension."""
    return MIME_TYPES.get(extension_of(path), DEFAULT_MIME_TYPE)


@dataclass
class Resource:
    """A readable file under ``resources/``."""

    name: str
    uri: str
    path: str
    mime_type: str
    size: int
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
            "size": self.size,
        }


@dataclass(frozen=True)
class ResourceTemplate:
    """Naming pattern for a kind of resource."""

    uri_template: str
    name: str
    description: str
    mime_type: str

    def to_dict(self) -> dict[str, str]:
        return {
            "uriTemplate": self.uri_template,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


RESOURCE_TEMPLATES: tuple[ResourceTemplate, ...] = (
    ResourceTemplate(
        uri_template=f"{RESOURCES_DIR}/{{name}}.txt",
        name="Text File",
        description="Create a new text file",
        mime_type="text/plain",
    ),
    ResourceTemplate(
        uri_template=f"{RESOURCES_DIR}/{{name}}.json",
        name="JSON File",
        description="Create a new JSON file",
        mime_type="application/json",
    ),
)


def path_to_uri(path: str) -> str:
    """Build the percent-encoded ``file://`` URI for a workspace-relative path."""
    return f"{URI_SCHEME}{quote(path, safe='/')}"


def uri_to_path(uri: str) -> str:
    """Strip the ``file://`` scheme from a resource URI and decode escapes."""
    if uri.startswith(URI_SCHEME):
        uri = uri[len(URI_SCHEME) :]
    return unquote(uri)


class ResourceManager:
    """Exposes the files in ``resources/`` as MCP resources."""

    name = "resources"
    directory = RESOURCES_DIR

    def __init__(self, gateway: FileGateway) -> None:
        self.gateway = gateway
        self._list_changed: ChangeNotifier[Callable[[], None]] = ChangeNotifier()
        self._updated: ChangeNotifier[Callable[[str], None]] = ChangeNotifier()

    async def initialize(self) -> None:
        await ensure_directory(self.gateway, self.directory, self.name)

    async def cleanup(self) -> None:
        pass

    async def list_resources(self, cursor: str | None = None) -> dict[str, list[Resource]]:
        """List every readable file in the resources directory.

        Entries that cannot be read are left out rather than failing the list.

        Args:
            cursor: Accepted for protocol compatibility; ignored

        Returns:
            ``{"resources": [...]}``

        Raises:
            CapabilityError: If the directory itself cannot be listed
        """
        listed = await self.gateway.handle_operation(FileOperation(OperationType.LIST, self.directory))
        if not listed.success:
            raise internal_error("Failed to list resources", {"reason": listed.error})

        resources: list[Resource] = []
        for filename in listed.data or []:
            if filename == PLACEHOLDER_FILENAME:
                continue

            file_path = f"{self.directory}/{filename}"
            read = await self.gateway.handle_operation(FileOperation(OperationType.READ, file_path))
            if not read.success or not read.data:
                logger.debug("Skipping resource %s: %s", file_path, read.error or "empty")
                continue

            created_at, updated_at = await self._timestamps(file_path)
            resources.append(
                Resource(
                    name=filename,
                    uri=path_to_uri(file_path),
                    path=file_path,
                    mime_type=mime_type_for(filename),
                    size=len(read.data),
                    description=f"File at {file_path}",
                    created_at=created_at,
                    updated_at=updated_at,
                )
            )

        return {"resources": resources}

    async def read_resource(self, uri: str) -> list[dict[str, str]]:
        """Read one resource by URI.

        Args:
            uri: Resource URI, with or without the ``file://`` prefix

        Returns:
            Single-element list of ``{uri, mimeType, text}``

        Raises:
            CapabilityError: If the file cannot be read or is empty
        """
        path = uri_to_path(uri)
        read = await self.gateway.handle_operation(FileOperation(OperationType.READ, path))
        if not read.success or not read.data:
            raise internal_error(f"Failed to read resource {uri}", {"reason": read.error})

        return [{"uri": uri, "mimeType": mime_type_for(path), "text": read.data}]

    async def list_resource_templates(self) -> list[ResourceTemplate]:
        return list(RESOURCE_TEMPLATES)

    async def subscribe_to_resource(self, uri: str) -> None:
        """Accept a subscription; no file watching is performed."""
        logger.debug("Subscription to %s accepted (no file watching)", uri)

    def on_resource_list_changed(self, callback: Callable[[], None]) -> Unsubscribe:
        return self._list_changed.subscribe(callback)

    def on_resource_updated(self, callback: Callable[[str], None]) -> Unsubscribe:
        return self._updated.subscribe(callback)

    async def _timestamps(self, path: str) -> tuple[datetime, datetime]:
        try:
            stat = await asyncio.to_thread(self.gateway.policy.resolve(path).stat)
        except OSError:
            now = datetime.now()
            return now, now
        return datetime.fromtimestamp(stat.st_ctime), datetime.fromtimestamp(stat.st_mtime)
