"""Filesystem adapters for generated files.

The generator only returns ``(path, content)`` pairs.  :class:`DiskWriter`
persists them under a root directory, doing blocking I/O in worker threads so
many files can be written concurrently; :class:`MemoryWriter` keeps them in a
dict for dry runs and tests.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from libgen.registry.generator import GeneratedFile

logger = logging.getLogger(__name__)


class FileExistsConflict(FileExistsError):
    """Raised when a write would replace an existing file without ``overwrite``."""


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class DiskWriter:
    """Writes files below *root*.

    Args:
        root: Library root; relative paths are resolved against it.
        overwrite: Replace existing files instead of raising
            :class:`FileExistsConflict`.
    """

    def __init__(self, root: str | Path, overwrite: bool = False) -> None:
        self.root = Path(root)
        self.overwrite = overwrite

    def resolve(self, path: str | Path) -> Path:
        return self.root / path

    async def exists(self, path: str | Path) -> bool:
        return await asyncio.to_thread(self.resolve(path).exists)

    async def read(self, path: str | Path) -> str:
        return await asyncio.to_thread(self.resolve(path).read_text, encoding="utf-8")

    async def write(self, path: str | Path, content: str) -> Path:
        target = self.resolve(path)
        if not self.overwrite and await asyncio.to_thread(target.exists):
            raise FileExistsConflict(f"Refusing to overwrite existing file: {target}")
        return await self._put(target, content)

    async def conflicts(self, files: Iterable[GeneratedFile]) -> list[Path]:
        """Return the targets among *files* that already exist."""
        targets = [self.resolve(f.path) for f in files]
        found = await asyncio.gather(*(asyncio.to_thread(t.exists) for t in targets))
        return [target for target, exists in zip(targets, found) if exists]

    async def write_all(self, files: Iterable[GeneratedFile]) -> list[Path]:
        """Write every file concurrently.

        Without ``overwrite`` every target is checked before the first write,
        so a conflict leaves the library untouched.
        """
        files = list(files)
        if not self.overwrite:
            existing = await self.conflicts(files)
            if existing:
                raise FileExistsConflict(
                    "Refusing to overwrite existing file(s): " + ", ".join(map(str, existing))
                )
        return list(
            await asyncio.gather(*(self._put(self.resolve(f.path), f.content) for f in files))
        )

    async def _put(self, target: Path, content: str) -> Path:
        await asyncio.to_thread(_write_file, target, content)
        logger.debug("Wrote %s (%d bytes)", target, len(content))
        return target


class MemoryWriter:
    """In-memory stand-in for :class:`DiskWriter`."""

    def __init__(self, overwrite: bool = False) -> None:
        self.overwrite = overwrite
        self.files: dict[str, str] = {}

    async def exists(self, path: str | Path) -> bool:
        return str(path) in self.files

    async def read(self, path: str | Path) -> str:
        try:
            return self.files[str(path)]
        except KeyError:
            raise FileNotFoundError(str(path)) from None

    async def write(self, path: str | Path, content: str) -> str:
        key = str(path)
        if not self.overwrite and key in self.files:
            raise FileExistsConflict(f"Refusing to overwrite existing file: {key}")
        self.files[key] = content
        return key

    async def write_all(self, files: Iterable[GeneratedFile]) -> list[str]:
        files = list(files)
        if not self.overwrite:
            existing = [f.path for f in files if f.path in self.files]
            if existing:
                raise FileExistsConflict(
                    "Refusing to overwrite existing file(s): " + ", ".join(existing)
                )
        return [await self.write(f.path, f.content) for f in files]
