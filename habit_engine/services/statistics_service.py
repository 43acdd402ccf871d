from __future__ import annotations
from datetime import date
from typing import Optional, Set, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..domain import statistics
from ..domain.recurrence import RecurrenceRule
from ..domain.statistics import PeriodProgress, ReportStats
from ..utils.get_user_time import today_in_zone
from .completion_ledger import CompletionLedger
from .habit_service import HabitService


class StatisticsService:
    """
    Habit statistics, recomputed from the ledger on every call.
    """

    @staticmethod
    async def _snapshot(session: AsyncSession, habit_id: int) -> Tuple[RecurrenceRule, Set[date]]:
        habit = await HabitService.get_habit(session, habit_id)
        rule = RecurrenceRule.from_habit(habit)
        completed = await CompletionLedger.completed_dates(session, habit_id)
        return rule, completed

    @staticmethod
    async def completions_in_total(session: AsyncSession, habit_id: int) -> int:
        await HabitService.get_habit(session, habit_id)
        return await CompletionLedger.count_total(session, habit_id)

    @staticmethod
    async def completions_percent(session: AsyncSession, habit_id: int, today: Optional[date] = None) -> Optional[int]:
        rule, completed = await StatisticsService._snapshot(session, habit_id)
        return statistics.completions_percent(rule, completed, today or today_in_zone())

    @staticmethod
    async def current_streak(session: AsyncSession, habit_id: int, today: Optional[date] = None) -> Optional[int]:
        rule, completed = await StatisticsService._snapshot(session, habit_id)
        return statistics.current_streak(rule, completed, today or today_in_zone())

    @staticmethod
    async def period_progress(
        session: AsyncSession,
        habit_id: int,
        reference_date: Optional[date] = None,
    ) -> Optional[PeriodProgress]:
        rule, completed = await StatisticsService._snapshot(session, habit_id)
        return statistics.period_progress(rule, completed, reference_date or today_in_zone())

    @staticmethod
    async def get_report_stats(session: AsyncSession, habit_id: int, today: Optional[date] = None) -> ReportStats:
        """
        All statistics of a habit from one read of its completions.
        """
        rule, completed = await StatisticsService._snapshot(session, habit_id)
        today = today or today_in_zone()
        stats = statistics.build_report_stats(rule, completed, today)
        logger.debug("Stats for habit {} on {}: {}", habit_id, today, stats)
        return stats
