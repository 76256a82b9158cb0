# gamepack/core/errors.py
from __future__ import annotations
from pathlib import Path
from typing import Any

__all__ = [
    "GamePackError",
    "InvalidPackageError",
    "ManifestParseError",
    "SourceTransformError",
    "SettingsError",
]



class GamePackError(Exception):
    """Base class for every error raised by gamepack itself."""
    pass



class InvalidPackageError(GamePackError):
    """
    Directory is not a game package (missing directory or missing manifest.json).

    GamePackage.initPaths() returns this instead of raising it.
    """
    def __init__(self, root: str | Path | None, message: str | None = None):
        self.root = root
        super().__init__(message or f"Invalid game archive '{root}' (expecting ./ and ./manifest.json)")



class ManifestParseError(GamePackError):
    """
    manifest.json could not be decoded into a manifest.

    Carries the raw file contents so the problem can be diagnosed without
    re-reading the file.
    """
    def __init__(self, path: str | Path, contents: str, error: Any):
        self.path = path
        self.contents = contents
        self.error = error
        super().__init__(f"JSON parse error in '{path}': {error}")



class SourceTransformError(GamePackError):
    """The AST engine failed to parse or regenerate a script."""
    def __init__(self, message: str, *, source: str | None = None):
        self.source = source
        super().__init__(message)



class SettingsError(GamePackError):
    """Settings file exists but cannot be used."""
    pass
