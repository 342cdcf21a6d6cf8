"""Root logger setup for the chartengine CLI and embedding services."""

from __future__ import annotations

import logging
import os
from typing import Any

__all__ = ["configure_logging", "resolve_level"]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(*candidates: str | int | None) -> int:
    """Return the first usable level among ``candidates``.

    Names are matched case-insensitively and digit strings are taken as
    numeric levels. Blank or unrecognised values are skipped; when nothing
    matches the result is :data:`logging.INFO`.
    """

    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, int):
            return candidate
        text = candidate.strip()
        if not text:
            continue
        if text.isdigit():
            return int(text)
        named = logging.getLevelName(text.upper())
        if isinstance(named, int):
            return named
    return logging.INFO


def configure_logging(*, level: str | int | None = None, **kwargs: Any) -> int:
    """Install a single stream handler on the root logger.

    ``level`` wins over the ``LOG_LEVEL`` environment variable. Extra
    ``kwargs`` go to :func:`logging.basicConfig`. Returns the level applied.
    """

    effective = resolve_level(level, os.environ.get("LOG_LEVEL"))
    kwargs.setdefault("format", LOG_FORMAT)
    kwargs.setdefault("datefmt", LOG_DATEFMT)
    kwargs.setdefault("force", True)
    logging.basicConfig(level=effective, **kwargs)
    logging.captureWarnings(True)
    return effective
