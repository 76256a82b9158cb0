# gamepack/core/ids.py
from __future__ import annotations

import uuid6

__all__ = ["uuidv7", "newAppId", "isValidAppId"]



def uuidv7(*, prefix: str = "") -> str:
    """Returns a UUIDv7 string (time-ordered), optionally prefixed."""
    return prefix + str(uuid6.uuid7())



def newAppId() -> str:
    """Returns a fresh 36-character package appID."""
    return uuidv7()



def isValidAppId(value: object) -> bool:
    return isinstance(value, str) and len(value) > 0
