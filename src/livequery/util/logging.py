"""Logging helpers."""

from __future__ import annotations

import logging
from typing import Optional

_ROOT = "livequery"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``livequery``."""
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stream handler to the package logger (CLI entry points only)."""
    from livequery.config import settings

    root = logging.getLogger(_ROOT)
    root.setLevel((level or settings.LIVEQUERY_LOG_LEVEL).upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
