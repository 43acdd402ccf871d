from __future__ import annotations
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Tuple

from ..errors import InvalidRuleError
from .recurrence import Period, RecurrenceRule


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive date window; empty when start > end."""

    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    @property
    def days(self) -> int:
        if self.is_empty:
            return 0
        return (self.end - self.start).days + 1

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


def week_bounds(day: date) -> Tuple[date, date]:
    """ISO week (Monday..Sunday) containing the day."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(day: date) -> Tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def resolve_period_window(rule: RecurrenceRule, reference_date: date) -> PeriodWindow:
    """
    Window used for "X times per period" counting, clipped to the habit's
    active window. Only valid for period-based rules.
    """
    if rule.period == Period.WEEK:
        start, end = week_bounds(reference_date)
    elif rule.period == Period.MONTH:
        start, end = month_bounds(reference_date)
    else:
        raise InvalidRuleError(f"{rule.frequency_type.value} habits have no period window")

    start = max(start, rule.start_date)
    if rule.end_date is not None:
        end = min(end, rule.end_date)
    return PeriodWindow(start, end)
