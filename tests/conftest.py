import asyncio
import inspect
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

from gamepack.config.settings import SETTINGS_ENV_VAR, ToolSettings, initSettings, resetSettings
from gamepack.core.jsonutils import serializeConfig
from gamepack.core.logging import clearLogContext



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")

    config.addinivalue_line("markers", "asyncio: mark a test to run inside an event loop")



@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Runs `@pytest.mark.asyncio async def` tests in a fresh event loop."""
    if pyfuncitem.get_closest_marker("asyncio") is None or not inspect.iscoroutinefunction(pyfuncitem.obj):
        return None
    funcargs = pyfuncitem.funcargs
    testArgs = {name: funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
    asyncio.run(pyfuncitem.obj(**testArgs))
    return True



@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    settings = initSettings(settings=ToolSettings())
    yield settings
    resetSettings()
    clearLogContext()



def write_manifest(root: Path, payload: dict[str, Any] | str) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    path = root / "manifest.json"
    text = payload if isinstance(payload, str) else serializeConfig(payload)
    path.write_text(text, encoding="utf-8")
    return path



@pytest.fixture()
def make_package(tmp_path) -> Callable[..., Path]:
    """
    Builds a package directory under tmp_path and returns its root.

      make_package({"appID": "x"}, files={"shared/a/B.js": "..."})
    """
    def _make(manifest: dict[str, Any] | str | None = None, *, name: str = "game", files: dict[str, str | bytes] | None = None) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            write_manifest(root, manifest)
        for relPath, content in (files or {}).items():
            target = root / relPath
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return root
    return _make
