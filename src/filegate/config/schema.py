"""Pydantic models for filegate.yaml configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileConfig(BaseModel):
    """Sandbox allow-lists.

    Empty lists deny every operation. The model is frozen: a dispatcher keeps
    the instance it was configured with for its whole lifetime.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    allowed_directories: list[str] = Field(
        default_factory=list,
        alias="allowedDirectories",
        description="Directories (and their descendants) that may be accessed",
    )
    allowed_extensions: list[str] = Field(
        default_factory=list,
        alias="allowedExtensions",
        description="File extensions that may be read, written or deleted (e.g. 'txt', 'json')",
    )

    @field_validator("allowed_directories")
    @classmethod
    def _resolve_directories(cls, value: list[str]) -> list[str]:
        resolved: list[str] = []
        for directory in value:
            if not str(directory).strip():
                continue
            path = str(Path(directory).expanduser().resolve(strict=False))
            if path not in resolved:
                resolved.append(path)
        return resolved

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for ext in value:
            ext = str(ext).strip().lower().lstrip(".")
            if ext and ext not in normalized:
                normalized.append(ext)
        return normalized


class WorkspaceConfig(BaseModel):
    """Location of the capability directories."""

    root: str = Field(
        default=".",
        description="Base directory holding resources/, tools/ and prompts/; relative paths resolve against it",
    )

    def resolved_root(self) -> Path:
        """Return the workspace root as an absolute path."""
        return Path(self.root).expanduser().resolve(strict=False)


class ServerConfig(BaseModel):
    """MCP server configuration."""

    name: str = Field(default="mcp-file-server", description="Server name reported to clients")
    transport: Literal["stdio", "http"] = Field(
        default="stdio",
        description="Transport used by 'filegate serve'",
    )
    host: str = Field(default="127.0.0.1", description="Bind address (HTTP transport only)")
    port: int = Field(default=8200, description="Bind port (HTTP transport only)", ge=1, le=65535)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level for the filegate logger",
    )
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log record format",
    )


class FilegateConfig(BaseModel):
    """Root configuration schema for Filegate."""

    files: FileConfig = Field(
        default_factory=FileConfig,
        description="Sandbox allow-lists; empty means the server starts unconfigured",
    )
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
