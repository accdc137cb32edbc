"""Shared contract for the resource, tool and prompt managers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from filegate.errors import internal_error
from filegate.sandbox.gateway import FileGateway, FileOperation, OperationType

logger = logging.getLogger(__name__)

CallbackT = TypeVar("CallbackT", bound=Callable[..., Any])

Unsubscribe = Callable[[], None]


@runtime_checkable
class CapabilityManager(Protocol):
    """Lifecycle every capability manager provides.

    Each family adds its own listing and execution operations on top
    (``list_resources``/``read_resource``, ``list_tools``/``execute_tool``,
    ``list_prompts``/``get_prompt``).
    """

    name: str
    directory: str

    async def initialize(self) -> None: ...

    async def cleanup(self) -> None: ...


class ChangeNotifier(Generic[CallbackT]):
    """Ordered list of change callbacks.

    Callbacks run in registration order. Nothing inside filegate calls
    :meth:`notify` yet; the list only backs the subscription API.
    """

    def __init__(self) -> None:
        self._callbacks: list[CallbackT] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: CallbackT) -> Unsubscribe:
        """Register a callback.

        Args:
            callback: Function to call on change

        Returns:
            Handle that removes this registration when called (safe to call twice)
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def notify(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            callback(*args)


async def ensure_directory(gateway: FileGateway, directory: str, family: str) -> None:
    """Make sure a manager's directory exists, creating it if listing fails.

    Args:
        gateway: Gateway used for the check and the creation
        directory: Directory path, relative to the workspace root
        family: Capability family name used in messages

    Raises:
        CapabilityError: If the directory cannot be created
    """
    listed = await gateway.handle_operation(FileOperation(OperationType.LIST, directory))
    if listed.success:
        return

    logger.info("%s directory not found, creating it", family.capitalize())
    created = await gateway.handle_operation(FileOperation(OperationType.CREATE_DIRECTORY, directory))
    if not created.success:
        logger.error("Failed to create %s directory: %s", family, created.error)
        raise internal_error(f"Failed to initialize {family} directory")
