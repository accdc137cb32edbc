"""Main CLI application using Typer."""

import sys

import typer
from rich.console import Console

from filegate import __version__

app = typer.Typer(
    name="filegate",
    help="Filegate - Sandboxed filesystem gateway for MCP clients",
    no_args_is_help=True,
)

console = Console()


@app.command()
def version():
    """Show filegate version."""
    console.print(f"filegate version {__version__}")


@app.command()
def serve(
    directories: list[str] = typer.Argument(
        None,
        help="Allowed directories (replace the config file's allow-list)",
    ),
    extensions: str = typer.Option(
        None,
        "--extensions",
        "-e",
        help="Comma-separated allowed extensions, e.g. txt,json,md",
    ),
    transport: str = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport type: stdio or http",
    ),
    host: str = typer.Option(None, "--host", help="Bind host (HTTP transport only)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (HTTP transport only)"),
    root: str = typer.Option(
        None,
        "--root",
        "-r",
        help="Workspace root holding resources/, tools/ and prompts/ (default: current directory)",
    ),
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.filegate/filegate.yaml)",
    ),
):
    """Start the MCP file server."""
    from filegate.cli.serve_cmd import serve_command

    code = serve_command(
        directories=directories,
        extensions=extensions,
        transport=transport,
        host=host,
        port=port,
        root=root,
        config_path=config_path,
    )
    if code:
        raise typer.Exit(code)


@app.command()
def op(
    action: str = typer.Argument(..., help="read, write, list, delete or mkdir"),
    path: str = typer.Argument(..., help="Target path"),
    content: str = typer.Argument(None, help="Content to write (write only)"),
    allow: list[str] = typer.Option(
        None,
        "--allow",
        "-a",
        help="Allowed directory (repeatable, default: current directory)",
    ),
    extensions: str = typer.Option(
        None,
        "--extensions",
        "-e",
        help="Comma-separated allowed extensions (default: txt,ts,js)",
    ),
):
    """Run a single sandboxed file operation."""
    from filegate.cli.op_cmd import op_command

    ext_list = [e for e in extensions.split(",") if e.strip()] if extensions else None
    code = op_command(action, path, content=content, allowed=allow, extensions=ext_list)
    if code:
        raise typer.Exit(code)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
