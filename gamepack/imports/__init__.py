# gamepack/imports/__init__.py
from .sanitizer import sanitizeCode, unsanitizeCode
from .parser import (
    ImportKind,
    ImportRecord,
    ImportScan,
    ImportScanner,
    UnmatchedImport,
    parseImports,
    resolveImportPath,
)

__all__ = [
    "sanitizeCode",
    "unsanitizeCode",
    "ImportKind",
    "ImportRecord",
    "ImportScan",
    "ImportScanner",
    "UnmatchedImport",
    "parseImports",
    "resolveImportPath",
]
