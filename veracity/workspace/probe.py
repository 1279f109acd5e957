"""
Workspace Probe — file existence, stat and listing against a project root.

Scanners and cross-checkers depend only on the FileProbe / WorkspaceFileLister
protocols; LocalWorkspace implements both over the local filesystem, pushing
the blocking calls onto a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from veracity.config import settings

logger = logging.getLogger("veracity.workspace")


@dataclass(frozen=True)
class FileStat:
    mtime: float  # epoch seconds


class FileProbe(Protocol):
    async def exists(self, path: str) -> bool: ...

    async def stat(self, path: str) -> FileStat: ...


class WorkspaceFileLister(Protocol):
    async def list_files(self) -> list[str]: ...


class LocalWorkspace:
    """Probe and lister rooted at a directory on disk."""

    def __init__(self, root: str | None = None, ignore_dirs: list[str] | None = None) -> None:
        self.root = Path(root or settings.workspace_root).resolve()
        self.ignore_dirs = set(ignore_dirs if ignore_dirs is not None else settings.workspace_ignore_dirs)

    def _resolve(self, path: str) -> Path | None:
        """Absolute path inside the root, or None when ``path`` escapes it."""
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        if not resolved.is_relative_to(self.root):
            logger.debug(f"Refusing to probe {path}: outside {self.root}")
            return None
        return resolved

    def _exists(self, path: str) -> bool:
        resolved = self._resolve(path)
        return resolved is not None and resolved.exists()

    def _stat(self, path: str) -> FileStat:
        resolved = self._resolve(path)
        if resolved is None:
            raise FileNotFoundError(path)
        return FileStat(mtime=resolved.stat().st_mtime)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._exists, path)

    async def stat(self, path: str) -> FileStat:
        return await asyncio.to_thread(self._stat, path)

    async def list_files(self) -> list[str]:
        return await asyncio.to_thread(self._walk)

    def _walk(self) -> list[str]:
        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = [d for d in dirnames if d not in self.ignore_dirs]
            for name in filenames:
                full = Path(dirpath) / name
                files.append(full.relative_to(self.root).as_posix())
        logger.debug(f"Listed {len(files)} workspace files under {self.root}")
        return files
