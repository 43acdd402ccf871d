import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlmodel import SQLModel

from habit_engine.config import settings
from habit_engine.db import build_engine
from habit_engine.models.habit import Habit, CompletionReport  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# `alembic -x url=...` targets another database than DATABASE_URL
DATABASE_URL = context.get_x_argument(as_dictionary=True).get("url", settings.DATABASE_URL)


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=SQLModel.metadata,
        compare_type=True,
        render_as_batch=DATABASE_URL.startswith("sqlite"),
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)


async def run_migrations_online() -> None:
    # Same engine factory as the app, so SQLite gets foreign keys on
    engine = build_engine(DATABASE_URL)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    asyncio.run(run_migrations_online())
