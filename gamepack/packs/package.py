# gamepack/packs/package.py
from __future__ import annotations
import asyncio
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gamepack.config.settings import config
from gamepack.core.errors import InvalidPackageError
from gamepack.core.jsonutils import serializeConfig, writeTextAtomic
from gamepack.core.logging import setLogContext
from gamepack.imports.parser import ImportRecord, parseImports
from gamepack.packs.listing import FileEntry, iterFiles, collectFiles
from gamepack.packs.manifest import (
    MANIFEST_FILE,
    Manifest,
    ManifestStore,
    PopulateOptions,
    applyDefaults,
    defaultManifest,
)
from gamepack.packs.scripts import NodeVisitor, ScriptWalk, walkSource

logger = logging.getLogger(__name__)

__all__ = [
    "PackagePaths",
    "GamePackage",
    "isPackage",
    "loadPackage",
    "getProject",
]



def isPackage(root: str | Path | None) -> bool:
    """A directory is a package iff it exists and contains manifest.json."""
    if not root:
        return False
    root = Path(root)
    return root.is_dir() and (root / MANIFEST_FILE).is_file()



@dataclass(frozen=True, slots=True)
class PackagePaths:
    root: Path
    shared: Path
    resources: Path
    icons: Path
    lang: Path
    manifest: Path

    @classmethod
    def fromRoot(cls, root: Path) -> PackagePaths:
        return cls(
            root=root,
            shared=root / "shared",
            resources=root / "resources",
            icons=root / "icons",
            lang=root / "resources" / "lang",
            manifest=root / MANIFEST_FILE,
        )

    def toDict(self) -> dict[str, str]:
        return {
            "root": str(self.root),
            "shared": str(self.shared),
            "resources": str(self.resources),
            "icons": str(self.icons),
            "lang": str(self.lang),
            "manifest": str(self.manifest),
        }



class GamePackage:
    """
    An on-disk game package: manifest.json plus shared/ scripts, resources/,
    icons/ and resources/lang/ translations.

    Blocking I/O has a *Sync twin; the async variants run the same work in a
    worker thread. Manifest saves replace the in-memory manifest before the
    write starts, and there is no lock around manifest.json.
    """

    def __init__(self, root: str | Path | None = None):
        self.paths: PackagePaths | None = None
        self.manifest: Manifest | None = None
        self._store: ManifestStore | None = None

        if not root:
            return

        err = self.initPaths(root)
        if err is not None:
            raise err
        self.readManifestSync()

    def __repr__(self) -> str:
        return f"GamePackage({str(self.paths.root) if self.paths else None!r})"

    # ----- Paths -----

    def initPaths(self, root: str | Path) -> InvalidPackageError | None:
        """
        Computes the package paths. Returns an InvalidPackageError (instead of
        raising it) when `root` is not a package.
        """
        if not isPackage(root):
            return InvalidPackageError(root)

        resolved = Path(root).resolve()
        self.paths = PackagePaths.fromRoot(resolved)
        self._store = ManifestStore(self.paths.manifest)
        return None

    def _requirePaths(self) -> PackagePaths:
        if self.paths is None:
            raise InvalidPackageError(None, "Package paths are not initialized; call initPaths() or load() first")
        return self.paths

    def _requireStore(self) -> ManifestStore:
        self._requirePaths()
        assert self._store is not None
        return self._store

    async def load(self, root: str | Path) -> GamePackage:
        err = self.initPaths(root)
        if err is not None:
            raise err
        await self.readManifest()
        return self

    # ----- Manifest -----

    def readManifestSync(self) -> Manifest:
        """
        Reads manifest.json, healing a missing/invalid appID on disk.
        Raises OSError or ManifestParseError.
        """
        self.manifest = self._requireStore().read()
        setLogContext(packageId=self.getID())
        return self.manifest

    async def readManifest(self) -> Manifest:
        store = self._requireStore()
        self.manifest = await asyncio.to_thread(store.read)
        setLogContext(packageId=self.getID())
        return self.manifest

    def getManifestKey(self, key: str, default: Any = None) -> Any:
        if self.manifest is None:
            return default
        return self.manifest.get(key, default)

    def _populatedManifest(self, options: PopulateOptions | Mapping[str, Any] | None) -> dict[str, Any]:
        existing = self.manifest.toData() if self.manifest is not None else {}
        return applyDefaults(existing, defaultManifest(options))

    async def populateManifest(self, options: PopulateOptions | Mapping[str, Any] | None = None) -> Manifest:
        """Fills in default manifest keys; keys already present are kept."""
        return await self.saveManifest(self._populatedManifest(options))

    def populateManifestSync(self, options: PopulateOptions | Mapping[str, Any] | None = None) -> Manifest:
        return self.saveManifestSync(self._populatedManifest(options))

    async def saveManifest(self, data: Manifest | Mapping[str, Any]) -> Manifest:
        store = self._requireStore()
        manifest = Manifest.fromData(data)
        self.manifest = manifest
        await asyncio.to_thread(store.write, manifest)
        return manifest

    def saveManifestSync(self, data: Manifest | Mapping[str, Any]) -> Manifest:
        store = self._requireStore()
        manifest = Manifest.fromData(data)
        self.manifest = manifest
        store.write(manifest)
        return manifest

    def getAddonConfig(self) -> dict[str, Any]:
        return self.getManifestKey("addons", None) or {}

    # ----- Identity -----

    def getID(self) -> str | None:
        if self.manifest is None:
            return None
        return self.manifest.shortName or self.manifest.appID

    def toDict(self) -> dict[str, Any]:
        packageId = self.getID()
        return {
            "id": packageId,
            "paths": self.paths.toDict() if self.paths else None,
            "manifest": self.manifest.toData() if self.manifest else None,
            "title": self.manifest.title if self.manifest else None,
            "url": f"/simulate/{packageId}/",
        }

    # ----- Resources -----

    def iterResources(self, exts: Iterable[str] | None = None) -> Iterator[FileEntry]:
        return iterFiles(self._requirePaths().resources, exts)

    def listResources(self, exts: Iterable[str] | None = None) -> list[FileEntry]:
        return collectFiles(self.iterResources(exts))

    def listIcons(self) -> list[FileEntry]:
        return collectFiles(iterFiles(self._requirePaths().icons, config("listing.imageExtensions")))

    def listImages(self) -> list[FileEntry]:
        return self.listResources(config("listing.imageExtensions"))

    def listSounds(self) -> list[FileEntry]:
        return self.listResources(config("listing.soundExtensions"))

    def listConfig(self) -> list[FileEntry]:
        return self.listResources(config("listing.configExtensions"))

    # ----- Scripts -----

    def scriptExtension(self) -> str:
        return str(config("scripts.extension", "js")).lstrip(".")

    def iterScripts(self) -> Iterator[FileEntry]:
        return iterFiles(self._requirePaths().shared, [self.scriptExtension()])

    def listScripts(self) -> list[FileEntry]:
        return collectFiles(self.iterScripts())

    def walkScriptSync(self, path: str | Path, visitor: NodeVisitor | None = None) -> ScriptWalk:
        """
        Reads a script and walks its AST, calling `visitor` per node. If the
        script cannot be parsed, the result carries the original code and
        transformed=False.
        """
        setLogContext(script=str(path))
        code = Path(path).read_text(encoding="utf-8")
        return walkSource(code, visitor)

    async def walkScript(self, path: str | Path, visitor: NodeVisitor | None = None) -> ScriptWalk:
        """Async twin of walkScriptSync(). Reading, parsing and visiting all run in a worker thread."""
        setLogContext(script=str(path))
        code = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        return await asyncio.to_thread(walkSource, code, visitor)

    def rewriteScriptSync(self, path: str | Path, visitor: NodeVisitor | None = None) -> ScriptWalk:
        """Walks a script and overwrites it with the regenerated source."""
        walk = self.walkScriptSync(path, visitor)
        writeTextAtomic(path, walk.code)
        return walk

    async def rewriteScript(self, path: str | Path, visitor: NodeVisitor | None = None) -> ScriptWalk:
        walk = await self.walkScript(path, visitor)
        await asyncio.to_thread(writeTextAtomic, path, walk.code)
        return walk

    def moduleNameFor(self, scriptPath: str | Path) -> str:
        """
        Dotted module name of a script relative to shared/:
          <root>/shared/game/ui/Menu.js -> "game.ui.Menu"
        """
        shared = self._requirePaths().shared
        relative = Path(scriptPath).resolve().relative_to(shared.resolve())
        return ".".join(relative.with_suffix("").parts)

    def scriptImports(self, scriptPath: str | Path) -> list[ImportRecord]:
        """Import records of one script, relative paths resolved against its own module name."""
        code = Path(scriptPath).read_text(encoding="utf-8")
        return parseImports(code, self.moduleNameFor(scriptPath))

    def listScriptImports(self) -> dict[str, list[ImportRecord]]:
        return {self.moduleNameFor(entry.path): self.scriptImports(entry.path) for entry in self.iterScripts()}

    # ----- Translations -----

    def getDefaultLanguage(self) -> str:
        return self.getManifestKey("defaultLang", "en")

    def listTranslations(self) -> list[FileEntry]:
        return collectFiles(iterFiles(self._requirePaths().lang, ["json"]))

    def _translationPath(self, code: str) -> Path:
        return self._requirePaths().lang / f"{code}.json"

    def getTranslationSync(self, code: str) -> Any | None:
        """Translation table for a language code, or None when missing or not valid JSON."""
        path = self._translationPath(code)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except ValueError as err:
            logger.warning("Failed to read translation '%s': %s", path, err)
            return None

    async def getTranslation(self, code: str) -> Any | None:
        return await asyncio.to_thread(self.getTranslationSync, code)

    def saveTranslationSync(self, code: str, data: Any) -> bool:
        lang = self._requirePaths().lang
        lang.mkdir(parents=True, exist_ok=True)
        writeTextAtomic(self._translationPath(code), serializeConfig(data))
        return True

    async def saveTranslation(self, code: str, data: Any) -> bool:
        return await asyncio.to_thread(self.saveTranslationSync, code, data)

    def removeTranslationSync(self, code: str) -> bool:
        self._translationPath(code).unlink()
        return True

    async def removeTranslation(self, code: str) -> bool:
        return await asyncio.to_thread(self.removeTranslationSync, code)



def loadPackage(root: str | Path) -> GamePackage:
    """Synchronous load; raises InvalidPackageError, OSError or ManifestParseError."""
    return GamePackage(root)



async def getProject(root: str | Path) -> GamePackage:
    return await GamePackage().load(root)
