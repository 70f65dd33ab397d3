"""Root logger setup for the dashboard process.

``BIBLIO_LOG_LEVEL`` takes a level name or number; a truthy ``BIBLIO_DEBUG``
forces DEBUG when no explicit level is set.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# Chatty at INFO: HTTP connection pool, NiceGUI reloader and access log.
_NOISY = ("urllib3", "watchfiles", "uvicorn.access")


def _parse_level(text: str) -> Optional[int]:
    text = text.strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else None


def env_level() -> Optional[int]:
    """Level requested through the environment, if any."""
    explicit = os.getenv("BIBLIO_LOG_LEVEL", "")
    if explicit.strip():
        return _parse_level(explicit)
    if os.getenv("BIBLIO_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def configure_root(default_level: int = logging.INFO) -> int:
    """Install the compact handler once and return the effective level."""
    level = env_level() or default_level
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
    if level > logging.DEBUG:
        for name in _NOISY:
            logging.getLogger(name).setLevel(logging.WARNING)
    return level


def level_name(level: int) -> str:
    return logging.getLevelName(level)


def env_requests_debug() -> bool:
    """True when the environment asks for DEBUG, which also unmutes urllib3."""
    level = env_level()
    return level is not None and level <= logging.DEBUG
