# gamepack/packs/listing.py
from __future__ import annotations
import asyncio
import logging
import os
from collections.abc import AsyncIterator, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from gamepack.config.settings import configBool

logger = logging.getLogger(__name__)

__all__ = [
    "FileEntry",
    "normalizeExtensions",
    "iterFiles",
    "collectFiles",
    "listFiles",
    "streamFiles",
]



@dataclass(frozen=True, slots=True)
class FileEntry:
    name: str                   # File name without extension, e.g. "en" for lang/en.json
    path: Path                  # Full path
    stat: os.stat_result

    @property
    def extension(self) -> str:
        return self.path.suffix[1:].lower()



def normalizeExtensions(exts: Iterable[str] | None) -> frozenset[str] | None:
    """["PNG", ".jpg"] -> {"png", "jpg"}. None stays None (match every file)."""
    if exts is None:
        return None
    return frozenset(str(ext).lower().lstrip(".") for ext in exts)



def _walk(
    dirPath: Path,
    *,
    exts: frozenset[str] | None,
    allowSymlinks: bool,
    pathStack: tuple[Path, ...],
) -> Iterator[FileEntry]:
    resolved = dirPath.resolve(strict=False)
    if resolved in pathStack:
        logger.warning("Detected symlink loop while listing files: '%s'", dirPath)
        return
    nextStack = pathStack + (resolved,)

    for child in sorted(dirPath.iterdir(), key=lambda p: p.name):
        if child.is_symlink() and child.is_dir() and not allowSymlinks:
            logger.debug("Skipping symlinked directory '%s'", child)
            continue
        if child.is_dir():
            yield from _walk(child, exts=exts, allowSymlinks=allowSymlinks, pathStack=nextStack)
            continue
        if not child.is_file():
            continue
        if exts is not None and child.suffix[1:].lower() not in exts:
            continue
        yield FileEntry(name=child.stem, path=child, stat=child.stat())



def iterFiles(base: str | Path, exts: Iterable[str] | None = None) -> Iterator[FileEntry]:
    """
    Lazily yields every file under `base` whose extension is in `exts`
    (case-insensitive, without the dot). exts=None yields every file.

    Traversal is depth-first with entries sorted by name inside each
    directory. A missing base yields nothing. The iterator is finite and can
    be consumed only once.
    """
    base = Path(base)
    if not base.is_dir():
        return iter(())
    return _walk(
        base,
        exts=normalizeExtensions(exts),
        allowSymlinks=configBool("listing.allowSymlinks", False),
        pathStack=(),
    )



def collectFiles(entries: Iterable[FileEntry]) -> list[FileEntry]:
    return list(entries)



def listFiles(base: str | Path, exts: Iterable[str] | None = None) -> list[FileEntry]:
    return collectFiles(iterFiles(base, exts))



async def streamFiles(base: str | Path, exts: Iterable[str] | None = None) -> AsyncIterator[FileEntry]:
    """
    Async stream over iterFiles(); yields control to the event loop between entries.
    """
    for entry in iterFiles(base, exts):
        yield entry
        await asyncio.sleep(0)
