# gamepack/core/jsonutils.py
from __future__ import annotations

import copy
import json
import os
from collections.abc import Mapping, Iterable
from dataclasses import is_dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

__all__ = [
    "safeJsonDumps",
    "serializeConfig",
    "writeTextAtomic",
    "writeJsonAtomic",
    "tryJSONify",
    "deepCopy",
]

T = TypeVar("T")



# ------------------------------------------------
#                JSON serialization
# ------------------------------------------------

def serializeConfig(data: Any) -> str:
    """
    Pretty-prints config data the way package files are stored on disk:
    tab indentation, UTF-8 characters kept as-is, no trailing newline.
    """
    return json.dumps(data, indent="\t", ensure_ascii=False)



def safeJsonDumps(obj: object) -> str:
    """
    Serializes an object to a compact JSON string.
    If direct JSON encoding fails, falls back to tryJSONify (circular/depth-safe) and retries.
    """
    try:
        return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except Exception:
        # Hardened fallback, used from logging formatters
        safePayload = tryJSONify(obj, _maxDepth=None)
        return json.dumps(safePayload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))



# ------------------------------------------------
#                  Atomic writes
# ------------------------------------------------

def writeTextAtomic(path: str | Path, text: str) -> None:
    """
    Writes `text` next to `path` first, then swaps it in with os.replace so
    readers never observe a half-written file.
    """
    path = Path(path)
    tmpPath = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmpPath, "w", encoding="utf-8", newline="") as fl:
            fl.write(text)
        os.replace(tmpPath, path)
    except BaseException:
        tmpPath.unlink(missing_ok=True)
        raise



def writeJsonAtomic(path: str | Path, data: Any) -> None:
    writeTextAtomic(path, serializeConfig(data))



# ------------------------------------------------
#              Generic JSON safety
# ------------------------------------------------

def tryJSONify(obj: Any, *, _seen: set[int] | None = None, _depth: int = 0, _maxDepth: int | None = 10) -> Any:
    """
    Attempts to make any object JSON-serializable.

    Rules:
      • Basic scalars (None, bool, int, float, str) are preserved.
      • Exceptions → {"type": ..., "message": ...}.
      • Path → string path.
      • sets/tuples/iterables → list.
      • Mappings → dict with str keys.
      • fallback → repr(obj)
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if _seen is None:
        _seen = set()

    oid = id(obj)
    if oid in _seen:
        return f"<circular_ref {type(obj).__name__}>"
    if isinstance(_maxDepth, int) and _depth > _maxDepth:
        return f"<max_depth_exceeded {type(obj).__name__}>"
    _seen.add(oid)

    if isinstance(obj, BaseException):
        return {"type": type(obj).__name__, "message": str(obj)}

    if isinstance(obj, Enum):
        return tryJSONify(obj.value, _seen=_seen, _depth=_depth + 1, _maxDepth=_maxDepth)

    if is_dataclass(obj) and not isinstance(obj, type):
        return tryJSONify(asdict(obj), _seen=_seen, _depth=_depth + 1, _maxDepth=_maxDepth)

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, Mapping):
        return {
            str(key): tryJSONify(value, _seen=_seen, _depth=_depth + 1, _maxDepth=_maxDepth) for key, value in obj.items()
        }

    if isinstance(obj, (set, frozenset, tuple)) or (isinstance(obj, Iterable) and not isinstance(obj, (bytes, bytearray))):
        return [tryJSONify(value, _seen=_seen, _depth=_depth + 1, _maxDepth=_maxDepth) for value in obj]

    # Last-ditch representation (avoid raising during logging)
    return repr(obj)



def deepCopy(value: T) -> T:
    """
    Deep-copies JSON-like data. Raises RuntimeError when the value cannot be copied.
    """
    try:
        return copy.deepcopy(value)
    except Exception as err:
        raise RuntimeError(f"deepCopy failed - {err.__class__.__name__} {err}") from err
