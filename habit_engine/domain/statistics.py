"""
Read-side projections over a recurrence rule and a snapshot of completed dates.

Every function here is pure: the caller loads the set of dates that have a
completion report and passes in what "today" is. Nothing is cached.

A scheduled date has *elapsed* once it is strictly in the past, or when it
is today and already completed. Today's pending occurrence never counts
against the habit.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import AbstractSet, List, Optional

from .periods import PeriodWindow, resolve_period_window
from .recurrence import RecurrenceRule


@dataclass(frozen=True)
class PeriodProgress:
    completed: int
    planned: int
    window: PeriodWindow


@dataclass
class ReportStats:
    completions_in_total: int
    completions_percent: Optional[int] = None
    current_streak: Optional[int] = None
    completions_in_period: Optional[int] = None
    completions_planned_in_period: Optional[int] = None
    completed_days: List[date] = field(default_factory=list)
    uncompleted_days: Optional[List[date]] = None


def completions_in_total(completed: AbstractSet[date]) -> int:
    return len(completed)


def elapsed_scheduled_dates(rule: RecurrenceRule, completed: AbstractSet[date], today: date) -> List[date]:
    """Scheduled dates up to today that count for percent/streak, ascending."""
    return [
        d for d in rule.scheduled_dates(rule.start_date, today)
        if d < today or d in completed
    ]


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def completions_percent(rule: RecurrenceRule, completed: AbstractSet[date], today: date) -> Optional[int]:
    """
    Share of elapsed scheduled dates that were completed, 0..100.
    None for period rules, and while no scheduled date has elapsed yet.
    """
    if not rule.is_day_based:
        return None
    elapsed = elapsed_scheduled_dates(rule, completed, today)
    if not elapsed:
        return None
    done = sum(1 for d in elapsed if d in completed)
    return _round_half_up(100 * done, len(elapsed))


def current_streak(rule: RecurrenceRule, completed: AbstractSet[date], today: date) -> Optional[int]:
    """
    Consecutive completed scheduled dates, counted back from the most recent
    elapsed one. None for period rules or when nothing has elapsed.
    """
    if not rule.is_day_based:
        return None
    elapsed = elapsed_scheduled_dates(rule, completed, today)
    if not elapsed:
        return None
    streak = 0
    for d in reversed(elapsed):
        if d not in completed:
            break
        streak += 1
    return streak


def period_progress(rule: RecurrenceRule, completed: AbstractSet[date], reference_date: date) -> Optional[PeriodProgress]:
    """
    Completions inside the week/month window around reference_date against
    the rule's target. None for WEEKLY_ON_DAYS, for a reference date after
    the habit has ended, or when the clipped window is empty.
    """
    if rule.is_day_based:
        return None
    if rule.end_date is not None and reference_date > rule.end_date:
        return None
    window = resolve_period_window(rule, reference_date)
    if window.is_empty:
        return None
    done = sum(1 for d in completed if d in window)
    return PeriodProgress(completed=done, planned=rule.target_count, window=window)


def completed_days(completed: AbstractSet[date]) -> List[date]:
    return sorted(completed)


def uncompleted_days(rule: RecurrenceRule, completed: AbstractSet[date], today: date) -> Optional[List[date]]:
    """Elapsed scheduled dates without a report. Only for WEEKLY_ON_DAYS."""
    if not rule.is_day_based:
        return None
    return [d for d in elapsed_scheduled_dates(rule, completed, today) if d not in completed]


def build_report_stats(rule: RecurrenceRule, completed: AbstractSet[date], today: date) -> ReportStats:
    stats = ReportStats(
        completions_in_total=completions_in_total(completed),
        completed_days=completed_days(completed),
    )
    if rule.is_day_based:
        stats.completions_percent = completions_percent(rule, completed, today)
        stats.current_streak = current_streak(rule, completed, today)
        stats.uncompleted_days = uncompleted_days(rule, completed, today)
    else:
        progress = period_progress(rule, completed, today)
        if progress is not None:
            stats.completions_in_period = progress.completed
            stats.completions_planned_in_period = progress.planned
    return stats
