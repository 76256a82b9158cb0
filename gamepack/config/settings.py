# gamepack/config/settings.py
from __future__ import annotations
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import json5
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gamepack.core.errors import SettingsError

logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS_ENV_VAR",
    "DEFAULT_SETTINGS_FILE",
    "ScriptSettings",
    "ListingSettings",
    "ImportSettings",
    "LoggingSettings",
    "ToolSettings",
    "loadSettings",
    "initSettings",
    "getSettings",
    "resetSettings",
    "config",
    "configBool",
]

SETTINGS_ENV_VAR = "GAMEPACK_SETTINGS"
DEFAULT_SETTINGS_FILE = "gamepack.json5"



class ScriptSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    extension: str = "js"



class ListingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    allowSymlinks: bool = False
    imageExtensions: list[str] = Field(default_factory=lambda: ["png", "jpg", "jpeg", "bmp", "gif"])
    soundExtensions: list[str] = Field(default_factory=lambda: ["mp3", "ogg"])
    configExtensions: list[str] = Field(default_factory=lambda: ["json"])



class ImportSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    strict: bool = False



class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    devMode: bool = True
    file: str | None = None



class ToolSettings(BaseModel):
    """Tool-wide settings, read from gamepack.json5."""
    model_config = ConfigDict(extra="forbid")

    scripts: ScriptSettings = Field(default_factory=ScriptSettings)
    listing: ListingSettings = Field(default_factory=ListingSettings)
    imports: ImportSettings = Field(default_factory=ImportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)



# ------------------------------------------------------------------ #
# Loading
# ------------------------------------------------------------------ #

def _settingsPath(path: str | Path | None) -> Path | None:
    if path is not None:
        return Path(path)
    envPath = os.environ.get(SETTINGS_ENV_VAR)
    if envPath:
        return Path(envPath)
    candidate = Path.cwd() / DEFAULT_SETTINGS_FILE
    return candidate if candidate.is_file() else None



def loadSettings(path: str | Path | None = None) -> ToolSettings:
    """
    Loads settings from `path`, $GAMEPACK_SETTINGS or ./gamepack.json5, in that order.

    No file at all → defaults. An explicitly named file that is missing raises
    FileNotFoundError; unparsable or invalid content raises SettingsError.
    """
    settingsPath = _settingsPath(path)
    if settingsPath is None:
        logger.debug("No settings file found, using defaults")
        return ToolSettings()

    text = settingsPath.read_text(encoding="utf-8")
    try:
        parsed = json5.loads(text)
    except Exception as err:
        raise SettingsError(f"Failed to parse settings file '{settingsPath}': {err}") from err

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise SettingsError(
            f"Settings file '{settingsPath}' must contain an object, not '{type(parsed).__name__}'"
        )

    try:
        settings = ToolSettings.model_validate(parsed)
    except ValidationError as err:
        raise SettingsError(f"Invalid settings in '{settingsPath}': {err}") from err

    logger.debug("Loaded settings from '%s'", settingsPath)
    return settings



# ------------------------------------------------------------------ #
# Process-wide singleton
# ------------------------------------------------------------------ #

_SETTINGS: ToolSettings | None = None



def initSettings(path: str | Path | None = None, *, settings: ToolSettings | None = None) -> ToolSettings:
    """
    Initialize (or replace) the process-wide settings.
    """
    global _SETTINGS
    _SETTINGS = settings if settings is not None else loadSettings(path)
    return _SETTINGS



def getSettings() -> ToolSettings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = loadSettings()
    return _SETTINGS



def resetSettings() -> None:
    global _SETTINGS
    _SETTINGS = None



def _lookup(data: Any, path: str) -> tuple[bool, Any]:
    current = data
    for part in path.split("."):
        if not part:
            return False, None
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return False, None
    return True, current



def config(path: str, default: Any = None) -> Any:
    """
    Read a dotted path from the current settings.

    Example:
      config("scripts.extension")       # returns "js"
      config("non.existing.path", 300)  # returns 300
    """
    found, value = _lookup(getSettings().model_dump(), path)
    if not found or value is None:
        return default
    return value



def configBool(path: str, default: bool = False) -> bool:
    val = config(path, None)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)
