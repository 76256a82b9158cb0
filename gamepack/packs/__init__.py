# gamepack/packs/__init__.py
from .package import GamePackage, PackagePaths, isPackage, loadPackage, getProject
from .manifest import Manifest, ManifestStore, PopulateOptions, applyDefaults, defaultManifest
from .listing import FileEntry, iterFiles, collectFiles, listFiles, streamFiles
from .scripts import ScriptNode, ScriptWalk, walkSource

__all__ = [
    "GamePackage",
    "PackagePaths",
    "isPackage",
    "loadPackage",
    "getProject",
    "Manifest",
    "ManifestStore",
    "PopulateOptions",
    "applyDefaults",
    "defaultManifest",
    "FileEntry",
    "iterFiles",
    "collectFiles",
    "listFiles",
    "streamFiles",
    "ScriptNode",
    "ScriptWalk",
    "walkSource",
]
