from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Union
from datetime import date, datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from loguru import logger

from ..domain.periods import resolve_period_window
from ..domain.recurrence import RecurrenceRule, weekdays_from_names
from ..errors import (
    CompletionNotAllowedError,
    DuplicateHabitError,
    InvalidRuleError,
    NotFoundError,
)
from ..models.habit import CompletionReport, FrequencyType, Habit, Weekday
from ..utils.get_user_time import local_date, today_in_zone
from .completion_ledger import CompletionLedger


@dataclass(frozen=True)
class HabitAtDay:
    habit_id: int
    name: str
    frequency_type: FrequencyType
    is_completed: bool
    is_photo_allowed: bool
    is_photo_uploaded: bool
    completions_in_period: Optional[int] = None
    completions_planned_in_period: Optional[int] = None


class HabitService:
    """
    CRUD and business logic for habits.
    """

    @staticmethod
    async def create_habit(
        session: AsyncSession,
        user_id: int,
        name: str,
        frequency_type: Union[FrequencyType, str],
        days_of_week: Optional[Iterable[Union[Weekday, str]]] = None,
        times_per_week: Optional[int] = None,
        times_per_month: Optional[int] = None,
        description: Optional[str] = None,
        is_photo_allowed: bool = False,
        is_harmful: bool = False,
        duration_days: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> Habit:
        """Create a new habit. The frequency payload is validated up front."""
        created_at = created_at or datetime.now(timezone.utc)
        weekdays = weekdays_from_names(days_of_week) if days_of_week is not None else frozenset()

        try:
            rule = RecurrenceRule(
                frequency_type=frequency_type,
                start_date=local_date(created_at),
                days_of_week=weekdays,
                times_per_week=times_per_week,
                times_per_month=times_per_month,
                duration_days=duration_days,
            )
        except InvalidRuleError as e:
            logger.warning("Rejected habit '{}' for user {}: {}", name, user_id, e)
            raise

        if is_harmful and not rule.is_day_based:
            raise InvalidRuleError("Only WEEKLY_ON_DAYS habits can be harmful")

        result = await session.execute(
            select(Habit.id).where(Habit.user_id == user_id, Habit.name == name)
        )
        if result.first() is not None:
            logger.warning("User {} already has a habit named '{}'", user_id, name)
            raise DuplicateHabitError(user_id, name)

        habit = Habit(
            user_id=user_id,
            name=name,
            description=description,
            is_photo_allowed=is_photo_allowed,
            is_harmful=is_harmful,
            duration_days=duration_days,
            frequency_type=rule.frequency_type,
            days_of_week=[d.value for d in Weekday if d in rule.days_of_week] or None,
            times_per_week=rule.times_per_week,
            times_per_month=rule.times_per_month,
            created_at=created_at,
        )
        session.add(habit)
        await session.flush()
        logger.info("Created habit {} for user {}", habit.id, user_id)
        return habit

    @staticmethod
    async def get_habit(session: AsyncSession, habit_id: int) -> Habit:
        habit = await session.get(Habit, habit_id)
        if not habit:
            raise NotFoundError(f"Habit {habit_id} not found")
        return habit

    @staticmethod
    async def list_habits(session: AsyncSession, user_id: int) -> List[Habit]:
        """List user's habits, oldest first."""
        result = await session.execute(
            select(Habit).where(Habit.user_id == user_id).order_by(Habit.created_at, Habit.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def edit_habit(
        session: AsyncSession,
        habit_id: int,
        description: Optional[str] = None,
        is_harmful: Optional[bool] = None,
        duration_days: Optional[int] = None,
    ) -> Habit:
        """
        Change only the given fields. duration_days=0 removes the duration.
        """
        habit = await HabitService.get_habit(session, habit_id)

        if is_harmful and habit.frequency_type != FrequencyType.WEEKLY_ON_DAYS:
            raise InvalidRuleError("Only WEEKLY_ON_DAYS habits can be harmful")

        new_duration = habit.duration_days
        if duration_days is not None:
            new_duration = None if duration_days == 0 else duration_days
            # Rebuilding the rule validates the new duration
            replace(RecurrenceRule.from_habit(habit), duration_days=new_duration)

        if description is not None:
            habit.description = description

        if is_harmful is not None:
            habit.is_harmful = is_harmful
        habit.duration_days = new_duration

        session.add(habit)
        await session.flush()
        logger.info("Edited habit {}", habit_id)
        return habit

    @staticmethod
    async def delete_habit(session: AsyncSession, habit_id: int) -> None:
        """Delete the habit together with its completion reports."""
        habit = await HabitService.get_habit(session, habit_id)
        removed = await CompletionLedger.delete_all(session, habit_id)
        await session.delete(habit)
        await session.flush()
        logger.info("Deleted habit {} ({} reports)", habit_id, removed)

    @staticmethod
    def is_current(habit: Habit, day: date) -> bool:
        return RecurrenceRule.from_habit(habit).is_scheduled(day)

    @staticmethod
    def days_left(habit: Habit, today: Optional[date] = None) -> Optional[int]:
        """Days left including today; None for habits without a duration."""
        if habit.duration_days is None:
            return None
        today = today or today_in_zone()
        full_days_passed = (today - local_date(habit.created_at)).days
        return habit.duration_days - full_days_passed

    @staticmethod
    async def habits_at_day(session: AsyncSession, user_id: int, day: date) -> List[HabitAtDay]:
        """User's habits that are current on the day, with their completion state."""
        items: List[HabitAtDay] = []
        for habit in await HabitService.list_habits(session, user_id):
            rule = RecurrenceRule.from_habit(habit)
            if not rule.is_scheduled(day):
                continue

            report = await CompletionLedger.get_report_at_day(session, habit.id, day)
            in_period = None
            if not rule.is_day_based:
                window = resolve_period_window(rule, day)
                in_period = await CompletionLedger.count_in_range(session, habit.id, window.start, window.end)

            items.append(HabitAtDay(
                habit_id=habit.id,
                name=habit.name,
                frequency_type=habit.frequency_type,
                is_completed=report.is_completed,
                is_photo_allowed=habit.is_photo_allowed,
                is_photo_uploaded=report.photo_url is not None,
                completions_in_period=in_period,
                completions_planned_in_period=rule.target_count,
            ))
        return items

    @staticmethod
    async def mark_completed(
        session: AsyncSession,
        habit_id: int,
        day: date,
        photo_url: Optional[str] = None,
        completion_time: Optional[datetime] = None,
        today: Optional[date] = None,
    ) -> CompletionReport:
        """
        Record a completion after checking the habit exists, the day has
        arrived and falls on or after the habit's start, and a photo is only
        attached where the habit allows one.
        """
        habit = await HabitService.get_habit(session, habit_id)
        today = today or today_in_zone()
        rule = RecurrenceRule.from_habit(habit)

        if day > today:
            logger.warning("Habit {}: completion for future day {} rejected", habit_id, day)
            raise CompletionNotAllowedError(
                "A habit can't be marked as completed for a day that has not yet arrived", habit_id
            )
        if day < rule.start_date:
            logger.warning("Habit {}: completion for {} before start {} rejected", habit_id, day, rule.start_date)
            raise CompletionNotAllowedError("A habit can't be marked as completed before it was created", habit_id)
        if photo_url is not None and not habit.is_photo_allowed:
            logger.warning("Habit {}: photo attached to a habit without photos", habit_id)
            raise CompletionNotAllowedError("This habit doesn't take a photo, but one was attached", habit_id)

        return await CompletionLedger.record_completion(session, habit_id, day, completion_time, photo_url)

    @staticmethod
    async def unmark_completed(session: AsyncSession, habit_id: int, day: date) -> None:
        await HabitService.get_habit(session, habit_id)
        await CompletionLedger.remove_completion(session, habit_id, day)

    @staticmethod
    async def set_photo(
        session: AsyncSession,
        habit_id: int,
        day: date,
        photo_url: Optional[str],
    ) -> CompletionReport:
        """Replace or clear the photo of an existing completion."""
        habit = await HabitService.get_habit(session, habit_id)
        if photo_url is not None and not habit.is_photo_allowed:
            raise CompletionNotAllowedError("This habit doesn't take a photo", habit_id)
        return await CompletionLedger.change_photo(session, habit_id, day, photo_url)
