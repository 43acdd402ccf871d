from __future__ import annotations
import sys
from typing import Optional

from loguru import logger

from .config import settings


def setup_logging(level: Optional[str] = None) -> int:
    """Replace loguru's default sink with a single stderr sink.

    Returns the id of the added sink so callers (tests) can remove it.
    """
    logger.remove()
    return logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}",
    )
