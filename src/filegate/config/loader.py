"""YAML configuration file for ``filegate serve``.

Relative paths in the file (``workspace.root`` and the entries of
``files.allowed_directories``) are taken relative to the directory holding the
file, so a config checked in next to a workspace keeps working from any cwd.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from filegate.config.schema import FilegateConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".filegate" / "filegate.yaml"


class ConfigError(Exception):
    """Configuration file could not be read or validated."""


def _anchor(value: Any, base: Path) -> Any:
    if not isinstance(value, str) or not value.strip():
        return value
    candidate = Path(value).expanduser()
    if candidate.is_absolute():
        return value
    return str(base / candidate)


def _anchor_paths(data: dict[str, Any], base: Path) -> dict[str, Any]:
    workspace = data.get("workspace")
    if isinstance(workspace, dict) and "root" in workspace:
        data["workspace"] = {**workspace, "root": _anchor(workspace["root"], base)}

    files = data.get("files")
    if isinstance(files, dict):
        key = "allowedDirectories" if "allowedDirectories" in files else "allowed_directories"
        directories = files.get(key)
        if isinstance(directories, list):
            data["files"] = {**files, key: [_anchor(d, base) for d in directories]}

    return data


def load_config(path: str | Path | None = None) -> FilegateConfig:
    """Load the config file, falling back to defaults when it is absent or empty.

    Raises:
        ConfigError: If the file exists but is not valid YAML or fails validation
    """
    path = Path(path).expanduser() if path is not None else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return FilegateConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    if raw is None:
        return FilegateConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration validation failed: {path} must contain a mapping")

    try:
        config = FilegateConfig.model_validate(_anchor_paths(raw, path.resolve().parent))
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    logger.info("Loaded configuration from %s", path)
    return config
