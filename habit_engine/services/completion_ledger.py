from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Set
from datetime import date, datetime, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func
from loguru import logger

from ..errors import DuplicateCompletionError, NotFoundError
from ..models.habit import CompletionReport


@dataclass(frozen=True)
class ReportAtDay:
    is_completed: bool
    completion_time: Optional[datetime] = None
    photo_url: Optional[str] = None


class CompletionLedger:
    """
    Per-day completion facts of habits. One report per (habit, day), enforced
    by the uq_completion_reports_habit_date constraint.
    """

    @staticmethod
    async def _find(session: AsyncSession, habit_id: int, day: date) -> Optional[CompletionReport]:
        result = await session.execute(
            select(CompletionReport).where(
                CompletionReport.habit_id == habit_id,
                CompletionReport.report_date == day,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def record_completion(
        session: AsyncSession,
        habit_id: int,
        day: date,
        completion_time: Optional[datetime] = None,
        photo_url: Optional[str] = None,
    ) -> CompletionReport:
        """Mark the habit done on the given day."""
        if await CompletionLedger._find(session, habit_id, day):
            logger.warning("Habit {} already completed on {}", habit_id, day)
            raise DuplicateCompletionError(habit_id, day)

        report = CompletionReport(
            habit_id=habit_id,
            report_date=day,
            completion_time=completion_time or datetime.now(timezone.utc),
            photo_url=photo_url,
        )
        try:
            async with session.begin_nested():
                session.add(report)
                await session.flush()
        except IntegrityError as e:
            # A concurrent writer got there between the check and the insert
            logger.warning("Concurrent completion of habit {} on {} rejected", habit_id, day)
            raise DuplicateCompletionError(habit_id, day) from e

        logger.info("Recorded completion of habit {} on {}", habit_id, day)
        return report

    @staticmethod
    async def remove_completion(session: AsyncSession, habit_id: int, day: date) -> None:
        report = await CompletionLedger._find(session, habit_id, day)
        if not report:
            raise NotFoundError(f"Habit {habit_id} has no completion on {day.isoformat()}")
        await session.delete(report)
        await session.flush()
        logger.info("Removed completion of habit {} on {}", habit_id, day)

    @staticmethod
    async def is_completed(session: AsyncSession, habit_id: int, day: date) -> bool:
        return await CompletionLedger._find(session, habit_id, day) is not None

    @staticmethod
    async def completions_in_range(
        session: AsyncSession,
        habit_id: int,
        start: date,
        end: Optional[date] = None,
    ) -> List[CompletionReport]:
        """Reports with start <= date <= end (end=None: no upper bound), ascending by date."""
        filters = [CompletionReport.habit_id == habit_id, CompletionReport.report_date >= start]
        if end is not None:
            filters.append(CompletionReport.report_date <= end)
        result = await session.execute(
            select(CompletionReport).where(*filters).order_by(CompletionReport.report_date)
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_in_range(session: AsyncSession, habit_id: int, start: date, end: date) -> int:
        if start > end:
            return 0
        result = await session.execute(
            select(func.count(CompletionReport.id)).where(
                CompletionReport.habit_id == habit_id,
                CompletionReport.report_date >= start,
                CompletionReport.report_date <= end,
            )
        )
        return result.scalar_one() or 0

    @staticmethod
    async def count_total(session: AsyncSession, habit_id: int) -> int:
        result = await session.execute(
            select(func.count(CompletionReport.id)).where(CompletionReport.habit_id == habit_id)
        )
        return result.scalar_one() or 0

    @staticmethod
    async def completed_dates(session: AsyncSession, habit_id: int) -> Set[date]:
        """All completed days of the habit, read in one query."""
        result = await session.execute(
            select(CompletionReport.report_date).where(CompletionReport.habit_id == habit_id)
        )
        return set(result.scalars().all())

    @staticmethod
    async def get_report_at_day(session: AsyncSession, habit_id: int, day: date) -> ReportAtDay:
        report = await CompletionLedger._find(session, habit_id, day)
        if not report:
            return ReportAtDay(is_completed=False)
        return ReportAtDay(
            is_completed=True,
            completion_time=report.completion_time,
            photo_url=report.photo_url,
        )

    @staticmethod
    async def change_photo(
        session: AsyncSession,
        habit_id: int,
        day: date,
        photo_url: Optional[str],
    ) -> CompletionReport:
        """Replace or clear (photo_url=None) the photo; completion status is untouched."""
        report = await CompletionLedger._find(session, habit_id, day)
        if not report:
            raise NotFoundError(f"Habit {habit_id} has no completion on {day.isoformat()}")
        report.photo_url = photo_url
        session.add(report)
        await session.flush()
        logger.info("Photo of habit {} on {} {}", habit_id, day, "updated" if photo_url else "cleared")
        return report

    @staticmethod
    async def delete_all(session: AsyncSession, habit_id: int) -> int:
        reports = await CompletionLedger.completions_in_range(session, habit_id, date.min)
        for report in reports:
            await session.delete(report)
        await session.flush()
        return len(reports)
