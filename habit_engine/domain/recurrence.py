from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, Optional, Union

from ..errors import InvalidRuleError
from ..models.habit import FrequencyType, Habit, Weekday
from ..utils.get_user_time import local_date

MAX_TIMES_PER_WEEK = 7
MAX_TIMES_PER_MONTH = 31
MAX_DURATION_DAYS = 730


class Period(str, Enum):
    WEEK = "WEEK"
    MONTH = "MONTH"


def _check_count(value: Optional[int], field: str, upper: int) -> None:
    if value is None:
        raise InvalidRuleError(f"{field} is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRuleError(f"{field} must be an integer")
    if not 1 <= value <= upper:
        raise InvalidRuleError(f"{field} must be between 1 and {upper}")


@dataclass(frozen=True)
class RecurrenceRule:
    """
    When a habit is expected to be performed.

    WEEKLY_ON_DAYS schedules individual weekdays; the two period rules make
    every active day eligible and carry a per-period target instead.
    The active window is [start_date, end_date], end_date being None when
    the habit has no duration.
    """

    frequency_type: FrequencyType
    start_date: date
    days_of_week: FrozenSet[Weekday] = frozenset()
    times_per_week: Optional[int] = None
    times_per_month: Optional[int] = None
    duration_days: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            freq = FrequencyType(self.frequency_type)
            days = frozenset(Weekday(d) for d in (self.days_of_week or ()))
        except ValueError as e:
            raise InvalidRuleError(str(e)) from e
        object.__setattr__(self, "frequency_type", freq)
        object.__setattr__(self, "days_of_week", days)

        if freq == FrequencyType.WEEKLY_ON_DAYS:
            if not days:
                raise InvalidRuleError("days_of_week must not be empty for WEEKLY_ON_DAYS")
            if self.times_per_week is not None or self.times_per_month is not None:
                raise InvalidRuleError("Extra parameters are given for WEEKLY_ON_DAYS")
        elif freq == FrequencyType.WEEKLY_X_TIMES:
            _check_count(self.times_per_week, "times_per_week", MAX_TIMES_PER_WEEK)
            if days or self.times_per_month is not None:
                raise InvalidRuleError("Extra parameters are given for WEEKLY_X_TIMES")
        else:
            _check_count(self.times_per_month, "times_per_month", MAX_TIMES_PER_MONTH)
            if days or self.times_per_week is not None:
                raise InvalidRuleError("Extra parameters are given for MONTHLY_X_TIMES")

        if self.duration_days is not None:
            _check_count(self.duration_days, "duration_days", MAX_DURATION_DAYS)

    @classmethod
    def from_habit(cls, habit: Habit, tz_name: Optional[str] = None) -> "RecurrenceRule":
        return cls(
            frequency_type=habit.frequency_type,
            start_date=local_date(habit.created_at, tz_name),
            days_of_week=frozenset(habit.weekdays),
            times_per_week=habit.times_per_week,
            times_per_month=habit.times_per_month,
            duration_days=habit.duration_days,
        )

    @property
    def end_date(self) -> Optional[date]:
        if self.duration_days is None:
            return None
        return self.start_date + timedelta(days=self.duration_days - 1)

    @property
    def period(self) -> Optional[Period]:
        if self.frequency_type == FrequencyType.WEEKLY_X_TIMES:
            return Period.WEEK
        if self.frequency_type == FrequencyType.MONTHLY_X_TIMES:
            return Period.MONTH
        return None

    @property
    def target_count(self) -> Optional[int]:
        if self.frequency_type == FrequencyType.WEEKLY_X_TIMES:
            return self.times_per_week
        if self.frequency_type == FrequencyType.MONTHLY_X_TIMES:
            return self.times_per_month
        return None

    @property
    def is_day_based(self) -> bool:
        return self.frequency_type == FrequencyType.WEEKLY_ON_DAYS

    def is_active(self, day: date) -> bool:
        if day < self.start_date:
            return False
        end = self.end_date
        return end is None or day <= end

    def is_scheduled(self, day: date) -> bool:
        if not self.is_active(day):
            return False
        if self.is_day_based:
            return Weekday.of(day) in self.days_of_week
        return True

    def scheduled_dates(self, start: date, end: date) -> Iterator[date]:
        """Scheduled dates in [start, end], ascending, clipped to the active window."""
        first = max(start, self.start_date)
        last = end if self.end_date is None else min(end, self.end_date)
        day = first
        while day <= last:
            if not self.is_day_based or Weekday.of(day) in self.days_of_week:
                yield day
            day += timedelta(days=1)


def weekdays_from_names(names: Iterable[Union[str, Weekday]]) -> FrozenSet[Weekday]:
    try:
        return frozenset(Weekday(str(n).upper()) if not isinstance(n, Weekday) else n for n in names)
    except ValueError as e:
        raise InvalidRuleError(str(e)) from e
