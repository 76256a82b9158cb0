# tests/gamepack/imports/test_parser.py
from __future__ import annotations
import logging

import pytest

from gamepack.config.settings import ToolSettings, initSettings
from gamepack.imports.parser import (
    ImportKind,
    ImportRecord,
    ImportScanner,
    parseImports,
    resolveImportPath,
)
from gamepack.imports.sanitizer import sanitizeCode


# ----------------------------------------
# resolveImportPath
# ----------------------------------------

def test_resolve_twoDotsStripsTwoSegments() -> None:
    assert resolveImportPath("..Foo", "a.b.c") == "a.Foo"


def test_resolve_oneDot() -> None:
    assert resolveImportPath(".Foo", "a.b.c") == "a.b.Foo"
    assert resolveImportPath(".sub.Foo", "a.b.c") == "a.b.sub.Foo"


def test_resolve_absolutePathUnchanged() -> None:
    assert resolveImportPath("Foo", "a.b.c") == "Foo"
    assert resolveImportPath("x.y.Foo", "a.b.c") == "x.y.Foo"
    assert resolveImportPath("x.y.Foo", "") == "x.y.Foo"


def test_resolve_baseWithoutDotIsStrippedWhole() -> None:
    assert resolveImportPath(".Foo", "a") == "Foo"


def test_resolve_moreDotsThanSegments() -> None:
    assert resolveImportPath("....Foo", "a.b") == "Foo"
    assert resolveImportPath(".Foo", "") == "Foo"


def test_resolve_onlyDots() -> None:
    assert resolveImportPath(".", "a.b.c") == "a.b"
    assert resolveImportPath("..", "a.b.c") == "a"


# ----------------------------------------
# parseImports - record shapes
# ----------------------------------------

def test_parse_importStatement() -> None:
    records = parseImports("import a.b.C;")
    assert len(records) == 1
    record = records[0]
    assert record.kind is ImportKind.IMPORT
    assert record.package == "a.b"
    assert record.className == "C"
    assert record.alias == "C"
    assert record.resolvedPath == "a.b.C"
    assert record.toDict() == {
        "kind": "import",
        "package": "a.b",
        "className": "C",
        "alias": "C",
        "resolvedPath": "a.b.C",
    }


def test_parse_fromStatement_aliasMatchesClassName() -> None:
    records = parseImports("from a.b import C as D;")
    assert records == [
        ImportRecord(
            kind=ImportKind.FROM,
            package="a.b",
            className="C",
            alias="C",
            resolvedPath="a.b.C",
            line=1,
        )
    ]


def test_parse_importWithAlias() -> None:
    (record,) = parseImports("import a.b.C as Widget;")
    assert record.className == "C"
    assert record.alias == "Widget"
    assert record.resolvedPath == "a.b.C"


def test_parse_singleSegmentImportKeepsPackage() -> None:
    (record,) = parseImports("import Foo;")
    assert record.package == "Foo"
    assert record.className == "Foo"
    assert record.resolvedPath == "Foo"


def test_parse_relativeImport() -> None:
    (record,) = parseImports("import ..ui.Menu;", "game.scenes.Intro")
    assert record.package == "game.ui"
    assert record.className == "Menu"
    assert record.alias == "Menu"
    assert record.resolvedPath == "game.ui.Menu"


def test_parse_relativeSingleSegmentImport() -> None:
    (record,) = parseImports("import .Sibling;", "game.scenes.Intro")
    assert record.package == "game.scenes"
    assert record.className == "Sibling"
    assert record.resolvedPath == "game.scenes.Sibling"


def test_parse_relativeFrom() -> None:
    (record,) = parseImports("from .util import clamp;", "game.scenes.Intro")
    assert record.kind is ImportKind.FROM
    assert record.package == "game.scenes.util"
    assert record.resolvedPath == "game.scenes.util.clamp"


def test_parse_fromCurrentPackage() -> None:
    (record,) = parseImports("from . import Sibling;", "game.scenes.Intro")
    assert record.package == "game.scenes"
    assert record.resolvedPath == "game.scenes.Sibling"


def test_parse_absolutePathIgnoresBase() -> None:
    (record,) = parseImports("import lib.Enum;", "game.scenes.Intro")
    assert record.resolvedPath == "lib.Enum"


def test_parse_multipleStatementsAndLineNumbers() -> None:
    code = "\n".join([
        '"use import";',
        "",
        "import a.B;",
        "    from c.d import E;",
        "var x = 1;",
        "import f.G;;",
    ])
    records = parseImports(code)
    assert [(r.kind, r.resolvedPath, r.line) for r in records] == [
        (ImportKind.IMPORT, "a.B", 3),
        (ImportKind.FROM, "c.d.E", 4),
        (ImportKind.IMPORT, "f.G", 6),
    ]


def test_parse_whitespaceBeforeTerminator() -> None:
    (record,) = parseImports("import a.b.C   ;")
    assert record.resolvedPath == "a.b.C"


# ----------------------------------------
# Malformed statements
# ----------------------------------------

@pytest.mark.parametrize("line", [
    "import a.b.C",             # missing terminator
    "from a.b import C",        # missing terminator
    "from a.b C;",              # missing import keyword
    "import a.b.C as;",         # missing alias
    "import a..C;",             # empty segment
    "import;",                  # no path
    "from a.b import;",         # no name
    "import a.b.C D E;",        # junk
])
def test_parse_malformedIsSkipped(line: str) -> None:
    assert parseImports(line) == []


def test_parse_malformedMixedWithValid() -> None:
    code = "import a.b.C\nimport d.E;\n"
    records = parseImports(code)
    assert [r.resolvedPath for r in records] == ["d.E"]


def test_parse_keywordsAreCaseSensitive() -> None:
    assert parseImports("IMPORT a.B;") == []


def test_parse_notAtLineStart() -> None:
    assert parseImports("var a = 1; import b.C;") == []


def test_parse_isRestartable() -> None:
    code = "import a.B;\nfrom c import D;\n"
    first = parseImports(code)
    second = parseImports(code)
    assert first == second
    assert len(first) == 2


def test_parse_sanitizedSource() -> None:
    code = "#ifdef X\nimport a.B;\n#endif\n//import old.Thing;\n"
    records = parseImports(sanitizeCode(code), sanitized=True)
    assert [r.resolvedPath for r in records] == ["a.B"]


# ----------------------------------------
# Scanner / strict mode
# ----------------------------------------

def test_scanner_reportsUnmatched() -> None:
    scan = ImportScanner("pkg").scan("import a.B;\nimport c.D\nvar x;\nfrom e.F;\n")
    assert [r.resolvedPath for r in scan.records] == ["a.B"]
    assert [(u.line, u.text) for u in scan.unmatched] == [(2, "import c.D"), (4, "from e.F;")]


def test_parse_strictLogsWarnings(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="gamepack.imports.parser"):
        records = parseImports("import a.B\nimport c.D;\n", strict=True)
    assert [r.resolvedPath for r in records] == ["c.D"]
    assert any("line 1" in message for message in caplog.messages)


def test_parse_strictFromSettings(caplog) -> None:
    initSettings(settings=ToolSettings.model_validate({"imports": {"strict": True}}))
    with caplog.at_level(logging.WARNING, logger="gamepack.imports.parser"):
        parseImports("import a.B\n")
    assert any("Unmatched import statement" in message for message in caplog.messages)


def test_parse_nonStrictIsSilent(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="gamepack.imports.parser"):
        parseImports("import a.B\n")
    assert caplog.messages == []
