import pytest
from loguru import logger
from sqlalchemy import inspect

from habit_engine.db import build_engine
from habit_engine.log_config import setup_logging
from habit_engine.main import shutdown, startup


def test_setup_logging_filters_below_level(capsys):
    sink_id = setup_logging("warning")
    try:
        logger.info("hidden message")
        logger.warning("visible message")
    finally:
        logger.remove(sink_id)
    err = capsys.readouterr().err
    assert "visible message" in err
    assert "hidden message" not in err


@pytest.mark.asyncio
async def test_startup_creates_tables():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await startup(engine)
    try:
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert {"habits", "completion_reports"} <= set(tables)
    finally:
        await shutdown(engine)
        logger.remove()


@pytest.mark.asyncio
async def test_get_session_commits_and_rolls_back(db_engine, monkeypatch):
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import sessionmaker

    import habit_engine.db as db
    from habit_engine.models.habit import FrequencyType
    from habit_engine.services.habit_service import HabitService

    monkeypatch.setattr(db, "AsyncSessionLocal", sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False))

    async with db.get_session() as session:
        await HabitService.create_habit(
            session, user_id=1, name="Read", frequency_type=FrequencyType.WEEKLY_X_TIMES, times_per_week=2
        )

    with pytest.raises(RuntimeError):
        async with db.get_session() as session:
            await HabitService.create_habit(
                session, user_id=1, name="Swim", frequency_type=FrequencyType.WEEKLY_X_TIMES, times_per_week=2
            )
            raise RuntimeError("boom")

    async with db.get_session() as session:
        names = [h.name for h in await HabitService.list_habits(session, 1)]
    assert names == ["Read"]
