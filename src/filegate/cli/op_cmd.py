"""Run a single gateway operation from the command line."""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console

from filegate.config.schema import FileConfig
from filegate.sandbox.gateway import FileGateway, FileOperation, FileResponse, OperationType
from filegate.sandbox.policy import SandboxPolicy

console = Console()

DEFAULT_EXTENSIONS = ["txt", "ts", "js"]

ACTIONS: dict[str, OperationType | str] = {
    "read": OperationType.READ,
    "write": OperationType.WRITE,
    "list": OperationType.LIST,
    "delete": OperationType.DELETE,
    "mkdir": OperationType.CREATE_DIRECTORY,
    "createDirectory": OperationType.CREATE_DIRECTORY,
}


async def run_operation(operation: FileOperation, config: FileConfig, base_dir: Path | None = None) -> FileResponse:
    gateway = FileGateway(SandboxPolicy(config, base_dir=base_dir))
    return await gateway.handle_operation(operation)


def op_command(
    action: str,
    path: str,
    content: str | None = None,
    allowed: list[str] | None = None,
    extensions: list[str] | None = None,
) -> int:
    """Execute one operation and print the result.

    Args:
        action: read, write, list, delete or mkdir
        path: Target path
        content: Content for write
        allowed: Allowed directories (default: current directory)
        extensions: Allowed extensions (default: txt, ts, js)

    Returns:
        Process exit code (0 on success)
    """
    config = FileConfig(
        allowed_directories=allowed or [str(Path.cwd())],
        allowed_extensions=extensions or DEFAULT_EXTENSIONS,
    )
    operation = FileOperation(type=ACTIONS.get(action, action), path=path, content=content)

    console.print(f"[dim]Allowed directories: {', '.join(config.allowed_directories)}[/dim]")
    console.print(f"[dim]Allowed extensions: {', '.join(config.allowed_extensions)}[/dim]")

    result = asyncio.run(run_operation(operation, config))

    if not result.success:
        console.print("[red]Operation failed[/red]")
        console.print(f"[red]Error: {result.error}[/red]")
        return 1

    console.print("[green]Operation successful[/green]")
    if isinstance(result.data, list):
        for entry in sorted(result.data):
            console.print(entry, markup=False, highlight=False)
    elif result.data:
        console.print(result.data, markup=False, highlight=False)
    return 0
