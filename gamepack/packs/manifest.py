# gamepack/packs/manifest.py
from __future__ import annotations
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from gamepack.core.errors import ManifestParseError
from gamepack.core.ids import isValidAppId, newAppId
from gamepack.core.jsonutils import deepCopy, writeJsonAtomic

logger = logging.getLogger(__name__)

__all__ = [
    "MANIFEST_FILE",
    "DEFAULT_STUDIO",
    "DEFAULT_ORIENTATIONS",
    "Manifest",
    "PopulateOptions",
    "defaultManifest",
    "applyDefaults",
    "ManifestStore",
]

MANIFEST_FILE = "manifest.json"

DEFAULT_STUDIO: dict[str, str] = {
    "name": "Your Studio Name",
    "domain": "studio.example.com",
    "stagingDomain": "staging.example.com",
}

DEFAULT_ORIENTATIONS: list[str] = ["portrait", "landscape"]



def _presentData(model: BaseModel) -> dict[str, Any]:
    """Dumps only the keys that were present on input or assigned later, extras included."""
    data = model.model_dump(exclude_unset=True)
    for key, value in (model.model_extra or {}).items():
        if key not in data:
            data[key] = deepCopy(value)
    return data



class Manifest(BaseModel):
    """
    In-memory manifest.json.

    Any JSON object is a valid manifest. Conventional keys are declared
    fields holding whatever value the file had; any other key is kept in the
    extra-fields bag and written back untouched. Only keys present in the
    source are dumped. An appID that is not a non-empty string is healed on read.
    """
    model_config = ConfigDict(extra="allow")

    appID: Any = None
    shortName: Any = None
    title: Any = None
    studio: Any = None
    supportedOrientations: Any = None
    defaultLang: Any = None
    addons: Any = None

    @classmethod
    def fromData(cls, data: Mapping[str, Any] | Manifest) -> Manifest:
        if isinstance(data, Manifest):
            return data
        return cls.model_validate(dict(data))

    def toData(self) -> dict[str, Any]:
        return _presentData(self)

    def hasValidAppID(self) -> bool:
        return isValidAppId(self.appID)

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Presence-checked lookup by top-level key. Never raises."""
        data = self.toData()
        return data[key] if key in data else default



class PopulateOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Any given value is copied as-is, only a missing one falls back to ""
    shortName: Any = ""
    title: Any = ""



def defaultManifest(options: PopulateOptions | Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Fresh manifest skeleton with a new appID."""
    if options is None or not isinstance(options, (PopulateOptions, Mapping)):
        options = PopulateOptions()
    elif isinstance(options, Mapping):
        options = PopulateOptions.model_validate(dict(options))

    return {
        "appID": newAppId(),
        "shortName": options.shortName,
        "title": options.title,
        "studio": dict(DEFAULT_STUDIO),
        "supportedOrientations": list(DEFAULT_ORIENTATIONS),
    }



def applyDefaults(existing: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """
    Returns defaults overlaid with `existing`, key by key (existing wins).
    Neither input is modified.
    """
    merged = deepCopy(dict(defaults))
    for key, value in existing.items():
        merged[key] = deepCopy(value)
    return merged



class ManifestStore:
    """
    Reads and writes one manifest.json.

    Writes are atomic (temp file + os.replace) but not locked: with two
    writers the last replace wins.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> Manifest:
        """
        Loads the manifest.

        Raises OSError when the file cannot be read and ManifestParseError
        (with the raw contents attached) when it is not a JSON object.
        A missing or invalid appID is replaced and written back before returning.
        """
        rawBytes = self.path.read_bytes()

        try:
            contents = rawBytes.decode("utf-8")
        except UnicodeDecodeError as err:
            raise ManifestParseError(self.path, rawBytes.decode("utf-8", errors="replace"), err) from err

        try:
            rawJson = json.loads(contents)
        except ValueError as err:
            raise ManifestParseError(self.path, contents, err) from err

        if not isinstance(rawJson, dict):
            raise ManifestParseError(self.path, contents, f"expected a JSON object, got '{type(rawJson).__name__}'")

        manifest = Manifest.fromData(rawJson)

        if not manifest.hasValidAppID():
            manifest.appID = newAppId()
            logger.warning("Manifest '%s' had no valid appID, assigned '%s'", self.path, manifest.appID)
            self.write(manifest)

        return manifest

    def write(self, manifest: Manifest | Mapping[str, Any]) -> None:
        data = manifest.toData() if isinstance(manifest, Manifest) else dict(manifest)
        writeJsonAtomic(self.path, data)
        logger.debug("Saved manifest '%s' (%d keys)", self.path, len(data))
