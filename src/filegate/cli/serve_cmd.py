"""CLI command for running the MCP file server."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from rich.console import Console

from filegate.config.schema import FileConfig
from filegate.dispatcher import Dispatcher, install_shutdown_hook
from filegate.errors import CapabilityError

console = Console(stderr=True)
logger = logging.getLogger(__name__)

_EXTENSION_PATTERN = re.compile(r"^\.[A-Za-z0-9_+-]+$")


def parse_extensions(raw: str | None) -> list[str]:
    """Parse a comma-separated ``--extensions`` value.

    Entries are stripped and given a leading dot; anything that is not a
    single extension (empty, containing spaces, slashes or inner dots) is
    dropped.

    Args:
        raw: Value such as ``"txt,.json, md"``

    Returns:
        Extensions with a leading dot, e.g. ``[".txt", ".json", ".md"]``
    """
    extensions: list[str] = []
    for entry in (raw or "").split(","):
        entry = entry.strip()
        if entry and not entry.startswith("."):
            entry = f".{entry}"
        if _EXTENSION_PATTERN.match(entry) and entry not in extensions:
            extensions.append(entry)
    return extensions


def build_file_config(directories: list[str], extensions: str | None) -> FileConfig:
    """Build the sandbox config from positional directories and ``--extensions``."""
    allowed_directories = [str(Path(d).resolve(strict=False)) for d in directories]
    if not allowed_directories:
        logger.warning("No allowed directories specified")

    allowed_extensions = parse_extensions(extensions)
    if not allowed_extensions:
        logger.warning("No valid extensions provided; every file operation will be denied")

    return FileConfig(allowed_directories=allowed_directories, allowed_extensions=allowed_extensions)


async def run_server(
    dispatcher: Dispatcher,
    file_config: FileConfig | None,
    transport: str = "stdio",
    host: str = "127.0.0.1",
    port: int = 8200,
) -> None:
    """Configure ``dispatcher`` and serve it until the transport ends or a signal arrives.

    Args:
        dispatcher: Dispatcher to serve
        file_config: Sandbox config, or None to serve unconfigured
        transport: ``stdio`` or ``http``
        host: Bind host for HTTP transport
        port: Bind port for HTTP transport
    """
    from filegate.mcp.server import create_mcp_server
    from filegate.mcp.transports import run_stdio_server, run_streamable_http_server

    if file_config is not None:
        await dispatcher.configure(file_config)
    else:
        logger.warning("Starting unconfigured; capability requests will be rejected")

    server = create_mcp_server(dispatcher)
    task = asyncio.current_task()
    install_shutdown_hook(dispatcher, on_shutdown=task.cancel if task else None)

    try:
        if transport == "stdio":
            await run_stdio_server(server)
        else:
            await run_streamable_http_server(server, host=host, port=port)
    except asyncio.CancelledError:
        logger.info("Server stopped")
    finally:
        await dispatcher.close()


def serve_command(
    directories: list[str] | None = None,
    extensions: str | None = None,
    transport: str | None = None,
    host: str | None = None,
    port: int | None = None,
    root: str | None = None,
    config_path: str | None = None,
) -> int:
    """Start the MCP file server.

    Directories and extensions given on the command line replace the
    ``files`` section of the config file.

    Args:
        directories: Allowed directories
        extensions: Comma-separated allowed extensions
        transport: Transport type (stdio or http); config value when None
        host: Bind host for HTTP transport
        port: Bind port for HTTP transport
        root: Workspace root holding resources/, tools/ and prompts/
        config_path: Optional path to config file

    Returns:
        Process exit code
    """
    from filegate.config.loader import ConfigError, load_config
    from filegate.logging_setup import configure_logging

    path = Path(config_path) if config_path else None
    try:
        config = load_config(path)
    except ConfigError as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        return 1

    configure_logging(config.logging)

    transport = transport or config.server.transport
    if transport == "streamable-http":
        transport = "http"
    if transport not in ("stdio", "http"):
        console.print(f"[red]Unknown transport: {transport}[/red]")
        console.print("Supported: stdio, http")
        return 1

    if directories or extensions is not None:
        file_config: FileConfig | None = build_file_config(directories or [], extensions)
    elif config.files.allowed_directories:
        file_config = config.files
    else:
        logger.warning("No allowed directories specified")
        file_config = None

    base_dir = Path(root).resolve(strict=False) if root else config.workspace.resolved_root()
    dispatcher = Dispatcher(server_name=config.server.name, base_dir=base_dir)

    if transport == "stdio":
        console.print("[cyan]Starting MCP file server (stdio transport)...[/cyan]")
    else:
        console.print(
            f"[cyan]Starting MCP file server (HTTP) on "
            f"{host or config.server.host}:{port or config.server.port}...[/cyan]"
        )

    try:
        asyncio.run(
            run_server(
                dispatcher,
                file_config,
                transport=transport,
                host=host or config.server.host,
                port=port or config.server.port,
            )
        )
    except CapabilityError as e:
        console.print(f"[red]Failed to start MCP file server: {e.message}[/red]")
        return 1
    return 0
