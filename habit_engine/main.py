from __future__ import annotations
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from .config import settings
from .db import engine, init_db
from .log_config import setup_logging


async def startup(target: AsyncEngine = engine) -> None:
    """Configure logging and make sure the schema exists."""
    setup_logging()
    await init_db(target)
    logger.info("habit_engine started ({} environment)", settings.ENV)


async def shutdown(target: AsyncEngine = engine) -> None:
    await target.dispose()
    logger.info("habit_engine shut down")
