"""Loguru sink configuration."""

from __future__ import annotations

import sys

from loguru import logger

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with one at ``level``.

    Calling again with the same level is a no-op.
    """
    global _CONFIGURED_LEVEL
    level = level.upper()
    if _CONFIGURED_LEVEL == level:
        return

    logger.remove()
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, backtrace=False)
    _CONFIGURED_LEVEL = level
