"""Logging setup for the HRMS backend."""

from __future__ import annotations

import logging
import sys

_LOGGER_PREFIX = "hrms"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the hrms namespace."""
    if name.startswith(_LOGGER_PREFIX):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stream handler to the hrms root logger.

    Safe to call more than once (app factory in tests).
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    if not any(getattr(h, "_hrms_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._hrms_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.propagate = False
    return root
