"""Request dispatcher and configuration lifecycle.

The dispatcher starts ``UNCONFIGURED``: only ``server/info`` and
``server/config`` are answered. A successful configuration builds the
sandbox, the gateway and the three capability managers and moves it to
``CONFIGURED``. :meth:`Dispatcher.close` moves it to ``CLOSED`` for good.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from filegate import __version__
from filegate.capabilities.prompts import PromptManager
from filegate.capabilities.resources import ResourceManager
from filegate.capabilities.tools import ToolManager
from filegate.config.schema import FileConfig
from filegate.errors import CapabilityError, ErrorCode, internal_error, invalid_params
from filegate.sandbox.gateway import FileGateway
from filegate.sandbox.policy import SandboxPolicy

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "mcp-file-server"


class RequestKind(str, Enum):
    """Request kinds understood by the dispatcher (MCP method names)."""

    SERVER_INFO = "server/info"
    SET_CONFIGURATION = "server/config"
    LIST_TOOLS = "tools/list"
    CALL_TOOL = "tools/call"
    LIST_RESOURCES = "resources/list"
    READ_RESOURCE = "resources/read"
    LIST_RESOURCE_TEMPLATES = "resources/templates/list"
    LIST_PROMPTS = "prompts/list"
    GET_PROMPT = "prompts/get"


# Answerable before configuration
LIFECYCLE_REQUESTS = frozenset({RequestKind.SERVER_INFO, RequestKind.SET_CONFIGURATION})


class DispatcherState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    CLOSED = "closed"


class Dispatcher:
    """Routes request kinds to the capability managers."""

    def __init__(
        self,
        server_name: str = DEFAULT_SERVER_NAME,
        base_dir: str | Path | None = None,
    ) -> None:
        """Initialize an unconfigured dispatcher.

        Args:
            server_name: Name reported by ``server/info``
            base_dir: Workspace root; relative paths and the capability
                directories resolve against it (defaults to the current directory)
        """
        self.server_name = server_name
        self.base_dir = Path(base_dir or Path.cwd()).expanduser().resolve(strict=False)
        self.state = DispatcherState.UNCONFIGURED
        self.config: FileConfig | None = None
        self.gateway: FileGateway | None = None
        self._resources: ResourceManager | None = None
        self._tools: ToolManager | None = None
        self._prompts: PromptManager | None = None
        self._shutdown_hook_installed = False
        self._shutdown_tasks: set[asyncio.Task[None]] = set()

    @property
    def is_configured(self) -> bool:
        return self.state is DispatcherState.CONFIGURED

    @property
    def resources(self) -> ResourceManager:
        self._require_configured()
        assert self._resources is not None
        return self._resources

    @property
    def tools(self) -> ToolManager:
        self._require_configured()
        assert self._tools is not None
        return self._tools

    @property
    def prompts(self) -> PromptManager:
        self._require_configured()
        assert self._prompts is not None
        return self._prompts

    async def configure(self, config: FileConfig) -> None:
        """Build the managers for ``config`` and initialize them concurrently.

        All three managers must initialize; otherwise the dispatcher keeps its
        previous state and the failure is raised.

        Args:
            config: Sandbox allow-lists

        Raises:
            CapabilityError: If the dispatcher is closed or a manager fails to initialize
        """
        if self.state is DispatcherState.CLOSED:
            raise internal_error("Server is closed")

        if not config.allowed_directories:
            logger.warning("No allowed directories configured; every operation will be denied")
        if not config.allowed_extensions:
            logger.warning("No allowed extensions configured; every file operation will be denied")

        policy = SandboxPolicy(config, base_dir=self.base_dir)
        gateway = FileGateway(policy)
        resources = ResourceManager(gateway)
        tools = ToolManager(gateway)
        prompts = PromptManager(gateway)
        managers = (resources, tools, prompts)

        results = await asyncio.gather(*(m.initialize() for m in managers), return_exceptions=True)
        for manager, result in zip(managers, results):
            if isinstance(result, BaseException):
                reason = result.message if isinstance(result, CapabilityError) else str(result)
                logger.error("Failed to initialize %s manager: %s", manager.name, reason)
                raise internal_error(f"Failed to initialize {manager.name} manager: {reason}") from result

        await self._cleanup_managers()
        self.config = config
        self.gateway = gateway
        self._resources, self._tools, self._prompts = managers
        self.state = DispatcherState.CONFIGURED
        logger.info(
            "Configured with directories=%s extensions=%s",
            config.allowed_directories,
            config.allowed_extensions,
        )

    async def dispatch(self, kind: RequestKind | str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Handle one request.

        Args:
            kind: Request kind (a :class:`RequestKind` or its method name)
            params: Request parameters

        Returns:
            JSON-compatible result payload

        Raises:
            CapabilityError: For unknown kinds, unconfigured or closed state,
                invalid parameters and manager failures
        """
        try:
            kind = RequestKind(kind)
        except ValueError:
            raise CapabilityError(ErrorCode.METHOD_NOT_FOUND, f"Unknown request: {kind}") from None

        params = params or {}
        if kind not in LIFECYCLE_REQUESTS:
            self._require_configured()

        logger.debug("Dispatching %s", kind.value)
        try:
            return await self._route(kind, params)
        except CapabilityError:
            raise
        except Exception as e:
            logger.exception("Request %s failed", kind.value)
            raise internal_error(f"Request {kind.value} failed: {e}") from e

    async def close(self) -> None:
        """Release the managers; safe to call more than once."""
        if self.state is DispatcherState.CLOSED:
            return
        self.state = DispatcherState.CLOSED
        await self._cleanup_managers()
        logger.info("Dispatcher closed")

    def server_info(self) -> dict[str, Any]:
        return {
            "name": self.server_name,
            "version": __version__,
            "configured": self.is_configured,
        }

    async def _route(self, kind: RequestKind, params: dict[str, Any]) -> dict[str, Any]:
        if kind is RequestKind.SERVER_INFO:
            return self.server_info()

        if kind is RequestKind.SET_CONFIGURATION:
            raw = params.get("config")
            if not isinstance(raw, dict):
                raise invalid_params("Missing required parameter: config")
            try:
                config = FileConfig.model_validate(raw)
            except ValidationError as e:
                raise invalid_params(f"Invalid configuration: {e}") from e
            await self.configure(config)
            return {"success": True}

        if kind is RequestKind.LIST_TOOLS:
            listed = await self.tools.list_tools(params.get("cursor"))
            return {"tools": [schema.to_dict() for schema in listed["tools"]]}

        if kind is RequestKind.CALL_TOOL:
            name = params.get("name")
            if not name:
                raise invalid_params("Missing required parameter: name")
            return await self.tools.execute_tool(name, params.get("arguments") or {})

        if kind is RequestKind.LIST_RESOURCES:
            listed = await self.resources.list_resources(params.get("cursor"))
            return {"resources": [{"name": r.name, "uri": r.uri} for r in listed["resources"]]}

        if kind is RequestKind.READ_RESOURCE:
            uri = params.get("uri")
            if not uri:
                raise invalid_params("Missing required parameter: uri")
            return {"contents": await self.resources.read_resource(uri)}

        if kind is RequestKind.LIST_RESOURCE_TEMPLATES:
            templates = await self.resources.list_resource_templates()
            return {"resourceTemplates": [t.to_dict() for t in templates]}

        if kind is RequestKind.LIST_PROMPTS:
            return await self.prompts.list_prompts(params.get("cursor"))

        # RequestKind.GET_PROMPT
        name = params.get("name")
        if not name:
            raise invalid_params("Missing required parameter: name")
        return await self.prompts.get_prompt(name, params.get("arguments"))

    def _require_configured(self) -> None:
        if self.state is DispatcherState.CLOSED:
            raise CapabilityError(ErrorCode.NOT_CONFIGURED, "Server is closed")
        if self.state is not DispatcherState.CONFIGURED:
            raise CapabilityError(ErrorCode.NOT_CONFIGURED, "Server is not configured")

    async def _cleanup_managers(self) -> None:
        for manager in (self._resources, self._tools, self._prompts):
            if manager is None:
                continue
            try:
                await manager.cleanup()
            except Exception as e:
                logger.warning("Error cleaning up %s manager: %s", manager.name, e)


def install_shutdown_hook(
    dispatcher: Dispatcher,
    on_shutdown: Callable[[], None] | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> bool:
    """Close ``dispatcher`` on SIGINT/SIGTERM.

    The hook is installed at most once per dispatcher.

    Args:
        dispatcher: Dispatcher to close
        on_shutdown: Called after the dispatcher is closed (e.g. to stop serving)
        loop: Event loop to register on (defaults to the running loop)

    Returns:
        True if the hook was installed by this call
    """
    if dispatcher._shutdown_hook_installed:
        return False

    loop = loop or asyncio.get_running_loop()

    async def _shutdown(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down", sig.name)
        await dispatcher.close()
        if on_shutdown is not None:
            on_shutdown()

    def _on_signal(sig: signal.Signals) -> None:
        task = loop.create_task(_shutdown(sig))
        dispatcher._shutdown_tasks.add(task)
        task.add_done_callback(dispatcher._shutdown_tasks.discard)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Signal handlers are unavailable on this platform/thread
            logger.debug("Cannot install handler for %s", sig.name)

    dispatcher._shutdown_hook_installed = True
    return True
