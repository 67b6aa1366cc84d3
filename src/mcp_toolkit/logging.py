"""Logging setup for mcp_toolkit.

Output goes to stderr. With the stdio transport stdout carries protocol
frames, so a handler there would corrupt the session.

``LOG_LEVEL`` and ``LOG_FORMAT`` apply when no explicit value is given.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_LEVEL = "INFO"

# marks the handler this module installs on the root logger
_HANDLER_FLAG = "_mcp_toolkit_handler"


def resolve_level(level: Union[str, int, None]) -> int:
    """Numeric level for a name ("debug", "WARNING") or number.

    Unknown names resolve to INFO.
    """
    if isinstance(level, int):
        return level
    name = (level or os.environ.get("LOG_LEVEL") or DEFAULT_LEVEL).strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def uvicorn_level(level: Union[str, int, None]) -> str:
    """The lowercase level name uvicorn's ``log_level`` option expects."""
    name = logging.getLevelName(resolve_level(level))
    return name.lower() if name in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG") else "info"


def _installed_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for h in root.handlers:
        if getattr(h, _HANDLER_FLAG, False):
            return h
    return None


def configure_logging(
    level: Union[str, int, None] = None, fmt: Optional[str] = None
) -> logging.Logger:
    """Install the stderr handler on the root logger and set its level.

    The handler is installed once. Later calls only change the level, and
    the format when ``fmt`` is passed.
    """
    root = logging.getLogger()
    handler = _installed_handler(root)
    if handler is None:
        # replace whatever basicConfig or a test runner put there
        for h in list(root.handlers):
            root.removeHandler(h)
        handler = logging.StreamHandler(stream=sys.stderr)
        setattr(handler, _HANDLER_FLAG, True)
        handler.setFormatter(logging.Formatter(fmt or os.environ.get("LOG_FORMAT", DEFAULT_FORMAT)))
        root.addHandler(handler)
    elif fmt:
        handler.setFormatter(logging.Formatter(fmt))
    root.setLevel(resolve_level(level))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    root = logging.getLogger()
    if _installed_handler(root) is None:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["DEFAULT_FORMAT", "configure_logging", "get_logger", "resolve_level", "uvicorn_level"]
