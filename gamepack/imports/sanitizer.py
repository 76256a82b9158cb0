# gamepack/imports/sanitizer.py
from __future__ import annotations
import re

__all__ = ["sanitizeCode", "unsanitizeCode"]

# Masking is anchored at line starts only. An import written after other code
# on the same line is left alone.
#
# Each pattern also matches its own masked form ("//" + line), so masking an
# already commented-out statement adds a second "//" and unmasking removes
# exactly one.

_DIRECTIVE = r"(?://)*#.*"
_IMPORT = r"(?:[ \t]|//)*(?:import|from)\b.*"

_DIRECTIVE_RE = re.compile(rf"^({_DIRECTIVE})$", re.MULTILINE)
_IMPORT_RE = re.compile(rf"^({_IMPORT})$", re.MULTILINE | re.IGNORECASE)

_MASKED_DIRECTIVE_RE = re.compile(rf"^//({_DIRECTIVE})$", re.MULTILINE)
_MASKED_IMPORT_RE = re.compile(rf"^//({_IMPORT})$", re.MULTILINE | re.IGNORECASE)



def sanitizeCode(code: str) -> str:
    """
    Comments out preprocessor directives and import/from statements so a
    standard JavaScript parser accepts the code.

      "#ifdef DEBUG"      -> "//#ifdef DEBUG"
      "import a.b.C;"     -> "//import a.b.C;"
      "  //from x import" -> "//  //from x import"

    unsanitizeCode(sanitizeCode(code)) == code holds for any input.
    """
    code = _DIRECTIVE_RE.sub(r"//\1", code)
    return _IMPORT_RE.sub(r"//\1", code)



def unsanitizeCode(code: str) -> str:
    """Removes exactly one "//" mask from every line sanitizeCode() touched."""
    code = _MASKED_DIRECTIVE_RE.sub(r"\1", code)
    return _MASKED_IMPORT_RE.sub(r"\1", code)
