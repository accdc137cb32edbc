"""Path and extension allow-list checks."""

from __future__ import annotations

import logging
from pathlib import Path

from filegate.config.schema import FileConfig

logger = logging.getLogger(__name__)


class SandboxPolicy:
    """Decides whether a path may be touched.

    Relative paths resolve against ``base_dir``. A path is inside the sandbox
    when it equals or descends from an allowed directory, compared segment by
    segment, so an allowed ``/a/b`` does not admit ``/a/bc``.
    """

    def __init__(self, config: FileConfig, base_dir: str | Path | None = None) -> None:
        self.config = config
        self.base_dir = Path(base_dir or Path.cwd()).expanduser().resolve(strict=False)
        self._roots = [Path(d) for d in config.allowed_directories]
        self._extensions = frozenset(config.allowed_extensions)

    def resolve(self, path: str | Path) -> Path:
        """Return the absolute, symlink-resolved form of ``path``."""
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.base_dir / candidate
        return candidate.resolve(strict=False)

    def is_path_allowed(self, path: str | Path) -> bool:
        absolute = self.resolve(path)
        allowed = any(absolute == root or absolute.is_relative_to(root) for root in self._roots)
        logger.debug(
            "Checking path %s (resolved %s) against %s: %s",
            path,
            absolute,
            [str(r) for r in self._roots],
            allowed,
        )
        return allowed

    def is_extension_allowed(self, path: str | Path) -> bool:
        ext = extension_of(path)
        allowed = ext in self._extensions
        logger.debug("Checking extension %r of %s: %s", ext, path, allowed)
        return allowed


def extension_of(path: str | Path) -> str:
    """Lowercase extension without the leading dot ('' when there is none)."""
    return Path(path).suffix.lower().lstrip(".")
