# gamepack/packs/scripts.py
from __future__ import annotations
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import esprima
from esprima.error_handler import Error as EsprimaError

from gamepack.core.errors import SourceTransformError
from gamepack.imports.sanitizer import sanitizeCode, unsanitizeCode

logger = logging.getLogger(__name__)

__all__ = [
    "ScriptNode",
    "ScriptWalk",
    "NodeVisitor",
    "transformSource",
    "walkSource",
]



class _SourceChunks:
    """
    Source text split into one chunk per character. Updating a node replaces
    the first chunk of its range and blanks the rest, so enclosing nodes see
    the edit when they read their own source.
    """

    def __init__(self, source: str):
        self._chunks: list[str] = list(source)

    def read(self, start: int, end: int) -> str:
        return "".join(self._chunks[start:end])

    def write(self, start: int, end: int, text: str) -> None:
        if end <= start:
            # Zero-length range: prepend in place so later chunk indexes do not shift
            if start < len(self._chunks):
                self._chunks[start] = text + self._chunks[start]
            else:
                self._chunks.append(text)
            return
        self._chunks[start] = text
        for idx in range(start + 1, end):
            self._chunks[idx] = ""

    def render(self) -> str:
        return "".join(self._chunks)



class ScriptNode:
    """
    One esprima AST node seen during a walk.

    Node attributes (type, body, id, ...) are available directly; source()
    returns the node's current text and update() replaces it.
    """

    def __init__(self, node: Any, chunks: _SourceChunks):
        self.node = node
        self._chunks = chunks

    @property
    def type(self) -> str:
        return self.node.type

    @property
    def range(self) -> tuple[int, int]:
        start, end = self.node.range
        return start, end

    def source(self) -> str:
        start, end = self.range
        return self._chunks.read(start, end)

    def update(self, text: str) -> None:
        start, end = self.range
        self._chunks.write(start, end, text)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.node, name)

    def __repr__(self) -> str:
        return f"ScriptNode({self.type}, {self.range})"



NodeVisitor = Callable[[ScriptNode], None]



@dataclass(slots=True)
class ScriptWalk:
    code: str
    nodes: list[ScriptNode] = field(default_factory=list)
    transformed: bool = True



def transformSource(code: str, visitor: NodeVisitor | None = None) -> tuple[str, list[ScriptNode]]:
    """
    Parses already sanitized `code` and calls `visitor` for every node,
    children before parents. Returns the regenerated source and the nodes.

    Raises SourceTransformError when the code cannot be parsed.
    """
    chunks = _SourceChunks(code)
    nodes: list[ScriptNode] = []

    def delegate(node: Any, metadata: Any) -> None:
        scriptNode = ScriptNode(node, chunks)
        nodes.append(scriptNode)
        if visitor is not None:
            visitor(scriptNode)

    try:
        esprima.parseScript(code, {"range": True}, delegate)
    except EsprimaError as err:
        raise SourceTransformError(f"Failed to parse script: {err}", source=code) from err

    return chunks.render(), nodes



def walkSource(code: str, visitor: NodeVisitor | None = None) -> ScriptWalk:
    """
    sanitize → parse/visit → regenerate → unsanitize.

    A parse failure is not an error here: the code comes back untouched with
    transformed=False.
    """
    sanitized = sanitizeCode(code)
    try:
        out, nodes = transformSource(sanitized, visitor)
    except SourceTransformError as err:
        logger.debug("Passing script through unchanged: %s", err)
        return ScriptWalk(code=code, nodes=[], transformed=False)
    return ScriptWalk(code=unsanitizeCode(out), nodes=nodes, transformed=True)
