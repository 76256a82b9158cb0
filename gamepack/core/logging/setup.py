# gamepack/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers

from gamepack.config.settings import config, configBool
from .formatters import DevFormatter, JsonFormatter

__all__ = [
    "configureLogging",
]

ROOT_LOGGER = "gamepack"



def configureLogging() -> logging.Logger:
    """
    Configure the "gamepack" logger hierarchy.

    Dev:
      - Console pretty logs (DEBUG)
      - JSON file log (DEBUG) when logging.file is set

    Prod:
      - Console INFO
      - JSON file log INFO with rotation when logging.file is set
    """
    devMode = configBool("logging.devMode", True)
    level = logging.DEBUG if devMode else logging.INFO

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(level)

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(level)
    consoleHandler.setFormatter(DevFormatter())
    root.addHandler(consoleHandler)

    logFile = config("logging.file", None)
    if logFile:
        fileHandler = logging.handlers.RotatingFileHandler(
            str(logFile),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        fileHandler.setLevel(level)
        fileHandler.setFormatter(JsonFormatter())
        root.addHandler(fileHandler)

    return root

