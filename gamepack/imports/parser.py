# gamepack/imports/parser.py
from __future__ import annotations
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gamepack.config.settings import configBool
from gamepack.imports.sanitizer import unsanitizeCode

logger = logging.getLogger(__name__)

__all__ = [
    "ImportKind",
    "ImportRecord",
    "UnmatchedImport",
    "ImportScan",
    "ImportScanner",
    "resolveImportPath",
    "parseImports",
]

_KEYWORD_RE = re.compile(r"^[ \t]*(import|from)(?=[\s;]|$)")
_IDENT = r"[A-Za-z_$][\w$]*"
_NAME_RE = re.compile(rf"^{_IDENT}$")
_PATH_RE = re.compile(rf"^\.*{_IDENT}(?:\.{_IDENT})*$")
_DOTS_RE = re.compile(r"^\.+$")



class ImportKind(Enum):
    IMPORT = "import"
    FROM = "from"



@dataclass(frozen=True, slots=True)
class ImportRecord:
    """
    One parsed import statement.

    `package` and `resolvedPath` are always absolute (relative dots already consumed).
    """
    kind: ImportKind
    package: str
    className: str
    alias: str
    resolvedPath: str
    line: int = 0

    def toDict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "package": self.package,
            "className": self.className,
            "alias": self.alias,
            "resolvedPath": self.resolvedPath,
        }



@dataclass(frozen=True, slots=True)
class UnmatchedImport:
    """A line starting with import/from that does not follow the grammar."""
    line: int
    text: str



@dataclass(frozen=True, slots=True)
class ImportScan:
    records: tuple[ImportRecord, ...]
    unmatched: tuple[UnmatchedImport, ...]



# ------------------------------------------------------------------ #
# Resolution
# ------------------------------------------------------------------ #

def resolveImportPath(path: str, basePackagePath: str = "") -> str:
    """
    Resolves a possibly relative dotted path against `basePackagePath`.

    Every leading dot drops one trailing segment from the base:
      resolveImportPath("..Foo", "a.b.c") -> "a.Foo"
      resolveImportPath(".Foo", "a.b.c")  -> "a.b.Foo"
      resolveImportPath("Foo", "a.b.c")   -> "Foo"
    """
    if not path.startswith("."):
        return path

    baseParts = basePackagePath.split(".") if basePackagePath else []
    while path.startswith("."):
        if baseParts:
            baseParts.pop()
        path = path[1:]

    if path:
        baseParts.append(path)
    return ".".join(baseParts)



def _splitLastSegment(path: str) -> tuple[str, str]:
    """
    Splits "..a.b.C" into ("..a.b", "C").
    A path with a single segment keeps itself as the package part: "C" -> ("C", "C"),
    while ".C" -> (".", "C").
    """
    body = path.lstrip(".")
    dots = path[:len(path) - len(body)]
    head, sep, last = body.rpartition(".")
    if sep:
        return dots + head, last
    if dots:
        return dots, last
    return path, last



def _joinPath(*parts: str) -> str:
    return ".".join(part for part in parts if part)



# ------------------------------------------------------------------ #
# Scanner
# ------------------------------------------------------------------ #

class ImportScanner:
    """
    Line tokenizer for

        import <path> [as <alias>];
        from <path> import <name> [as <alias>];

    Lines that do not follow the grammar are not errors; they are collected in
    ImportScan.unmatched when they start with an import/from keyword and
    ignored otherwise.

    The scanner keeps no position between calls: scan() can be called any
    number of times on the same text with identical results.
    """

    def __init__(self, basePackagePath: str = ""):
        self.basePackagePath = basePackagePath or ""

    def scan(self, code: str, *, sanitized: bool = False) -> ImportScan:
        """
        Scans `code` for import statements. With sanitized=True the code is
        expected to be the output of sanitizeCode() and is unmasked first.
        """
        if sanitized:
            code = unsanitizeCode(code)

        records: list[ImportRecord] = []
        unmatched: list[UnmatchedImport] = []
        for lineNo, keyword, tokens, text in self._statements(code):
            record = self._parseStatement(keyword, tokens, lineNo) if tokens is not None else None
            if record is None:
                unmatched.append(UnmatchedImport(line=lineNo, text=text))
            else:
                records.append(record)
        return ImportScan(records=tuple(records), unmatched=tuple(unmatched))

    def _statements(self, code: str) -> Iterator[tuple[int, str, list[str] | None, str]]:
        """
        Yields (lineNo, keyword, tokens, text) for every line starting with a
        keyword. `tokens` is None when the terminator is missing.
        """
        for lineNo, text in enumerate(code.splitlines(), start=1):
            match = _KEYWORD_RE.match(text)
            if match is None:
                continue
            keyword = match.group(1)
            body = text[match.end():].rstrip()
            if not body.endswith(";"):
                yield lineNo, keyword, None, text
                continue
            yield lineNo, keyword, body.rstrip(";").split(), text

    def _parseStatement(self, keyword: str, tokens: list[str], lineNo: int) -> ImportRecord | None:
        if keyword == "import":
            return self._parseImport(tokens, lineNo)
        return self._parseFrom(tokens, lineNo)

    def _parseImport(self, tokens: list[str], lineNo: int) -> ImportRecord | None:
        # <path> [as <alias>]
        if len(tokens) not in (1, 3):
            return None
        path = tokens[0]
        if not _PATH_RE.match(path):
            return None
        alias: str | None = None
        if len(tokens) == 3:
            if tokens[1] != "as" or not _NAME_RE.match(tokens[2]):
                return None
            alias = tokens[2]

        packagePath, className = _splitLastSegment(path)
        return ImportRecord(
            kind=ImportKind.IMPORT,
            package=resolveImportPath(packagePath, self.basePackagePath),
            className=className,
            alias=(alias or className).lstrip("."),
            resolvedPath=resolveImportPath(path, self.basePackagePath),
            line=lineNo,
        )

    def _parseFrom(self, tokens: list[str], lineNo: int) -> ImportRecord | None:
        # <path> import <name> [as <alias>]
        if len(tokens) not in (3, 5):
            return None
        path, importKw, name = tokens[0], tokens[1], tokens[2]
        if importKw != "import":
            return None
        if not (_PATH_RE.match(path) or _DOTS_RE.match(path)):
            return None
        if not _NAME_RE.match(name):
            return None
        if len(tokens) == 5 and (tokens[3] != "as" or not _NAME_RE.match(tokens[4])):
            return None

        # An explicit alias is accepted but not modelled: alias == className.
        # The name is joined after the package is resolved, so "from . import X"
        # stays in the current package instead of climbing one more level.
        package = resolveImportPath(path, self.basePackagePath)
        return ImportRecord(
            kind=ImportKind.FROM,
            package=package,
            className=name,
            alias=name,
            resolvedPath=_joinPath(package, name),
            line=lineNo,
        )



def parseImports(
    code: str,
    basePackagePath: str = "",
    *,
    strict: bool | None = None,
    sanitized: bool = False,
) -> list[ImportRecord]:
    """
    Best-effort scan of `code` returning only the statements that matched.

    Malformed statements never raise. In strict mode (argument, or the
    imports.strict setting when not given) each of them is logged as a warning.
    """
    scan = ImportScanner(basePackagePath).scan(code, sanitized=sanitized)

    if strict is None:
        strict = configBool("imports.strict", False)
    if strict:
        for item in scan.unmatched:
            logger.warning("Unmatched import statement at line %d: %s", item.line, item.text.strip())

    return list(scan.records)
