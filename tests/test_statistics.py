from datetime import date, timedelta

from habit_engine.domain import statistics
from habit_engine.domain.recurrence import RecurrenceRule
from habit_engine.models.habit import FrequencyType, Weekday

JAN_1 = date(2025, 1, 1)  # Wednesday
EVERY_DAY = set(Weekday)


def mon_wed(**kwargs):
    return RecurrenceRule(
        FrequencyType.WEEKLY_ON_DAYS, JAN_1, days_of_week={Weekday.MONDAY, Weekday.WEDNESDAY}, **kwargs
    )


def d(day, month=1):
    return date(2025, month, day)


def test_percent_is_none_until_first_scheduled_day_elapses():
    rule = mon_wed()
    assert statistics.completions_percent(rule, set(), d(1)) is None
    assert statistics.current_streak(rule, set(), d(1)) is None
    # created on Wednesday, next scheduled day is Monday
    assert statistics.completions_percent(rule, set(), d(2)) == 0
    assert statistics.completions_percent(rule, set(), date(2024, 12, 31)) is None


def test_today_counts_only_once_completed():
    rule = mon_wed()
    assert statistics.completions_percent(rule, {d(1)}, d(1)) == 100
    assert statistics.current_streak(rule, {d(1)}, d(1)) == 1

    # Monday 1-6 not completed yet: still 100%
    assert statistics.completions_percent(rule, {d(1)}, d(6)) == 100
    assert statistics.current_streak(rule, {d(1)}, d(6)) == 1
    assert statistics.uncompleted_days(rule, {d(1)}, d(6)) == []


def test_percent_and_streak_over_several_weeks():
    rule = mon_wed()
    completed = {d(1), d(8), d(15)}
    today = d(16)  # elapsed: 1, 6, 8, 13, 15
    assert statistics.completions_percent(rule, completed, today) == 60
    assert statistics.current_streak(rule, completed, today) == 1
    assert statistics.uncompleted_days(rule, completed, today) == [d(6), d(13)]


def test_streak_is_zero_when_latest_elapsed_day_was_missed():
    rule = mon_wed()
    assert statistics.current_streak(rule, {d(1)}, d(7)) == 0
    assert statistics.completions_percent(rule, {d(1)}, d(7)) == 50


def test_streak_stops_at_creation_date():
    rule = mon_wed()
    completed = {d(1), d(6), d(8)}
    assert statistics.current_streak(rule, completed, d(9)) == 3


def test_percent_rounds_half_up():
    rule = mon_wed()
    assert statistics.completions_percent(rule, {d(6), d(8)}, d(9)) == 67
    assert statistics.completions_percent(rule, {d(8)}, d(9)) == 33

    daily = RecurrenceRule(FrequencyType.WEEKLY_ON_DAYS, JAN_1, days_of_week=EVERY_DAY)
    # 1 of 8 = 12.5%
    assert statistics.completions_percent(daily, {d(8)}, d(9)) == 13


def test_bounded_habit_stops_counting_after_its_duration():
    daily = RecurrenceRule(FrequencyType.WEEKLY_ON_DAYS, JAN_1, days_of_week=EVERY_DAY, duration_days=3)
    completed = {d(2), d(3), d(10)}
    assert statistics.completions_percent(daily, completed, d(1, month=2)) == 67
    assert statistics.current_streak(daily, completed, d(1, month=2)) == 2
    # total is unconditional on the schedule
    assert statistics.completions_in_total(completed) == 3


def test_percent_stays_in_range_for_any_day():
    rule = mon_wed()
    completed = {d(1), d(6), d(13), d(20), d(22)}
    for offset in range(0, 40):
        today = JAN_1 + timedelta(days=offset)
        percent = statistics.completions_percent(rule, completed, today)
        if percent is not None:
            assert 0 <= percent <= 100


def test_day_based_stats_are_none_for_period_rules():
    rule = RecurrenceRule(FrequencyType.WEEKLY_X_TIMES, JAN_1, times_per_week=3)
    assert statistics.completions_percent(rule, {d(2)}, d(10)) is None
    assert statistics.current_streak(rule, {d(2)}, d(10)) is None
    assert statistics.uncompleted_days(rule, {d(2)}, d(10)) is None
    assert statistics.period_progress(mon_wed(), {d(1)}, d(1)) is None


def test_weekly_period_progress_in_first_partial_week():
    rule = RecurrenceRule(FrequencyType.WEEKLY_X_TIMES, JAN_1, times_per_week=3)
    progress = statistics.period_progress(rule, {d(2), d(3)}, d(3))
    assert progress.completed == 2
    assert progress.planned == 3
    assert (progress.window.start, progress.window.end) == (d(1), d(5))
    assert progress.completed <= progress.window.days


def test_monthly_period_progress_counts_only_the_month():
    rule = RecurrenceRule(FrequencyType.MONTHLY_X_TIMES, d(15), times_per_month=10)
    completed = {d(20), d(31), d(1, month=2)}
    assert statistics.period_progress(rule, completed, d(20)).completed == 2
    february = statistics.period_progress(rule, completed, d(10, month=2))
    assert (february.completed, february.planned) == (1, 10)


def test_period_progress_is_none_outside_active_days():
    rule = RecurrenceRule(FrequencyType.WEEKLY_X_TIMES, JAN_1, times_per_week=1, duration_days=1)
    assert statistics.period_progress(rule, {d(1)}, d(1)).completed == 1
    assert statistics.period_progress(rule, {d(1)}, d(2)) is None
    assert statistics.period_progress(rule, set(), date(2024, 12, 20)) is None


def test_build_report_stats_for_day_based_habit():
    stats = statistics.build_report_stats(mon_wed(), {d(8), d(1)}, d(9))
    assert stats.completions_in_total == 2
    assert stats.completions_percent == 67
    assert stats.current_streak == 1
    assert stats.completed_days == [d(1), d(8)]
    assert stats.uncompleted_days == [d(6)]
    assert stats.completions_in_period is None
    assert stats.completions_planned_in_period is None


def test_build_report_stats_for_period_habit():
    rule = RecurrenceRule(FrequencyType.WEEKLY_X_TIMES, JAN_1, times_per_week=3)
    stats = statistics.build_report_stats(rule, {d(2), d(3), d(7)}, d(7))
    assert stats.completions_in_total == 3
    assert stats.completions_in_period == 1
    assert stats.completions_planned_in_period == 3
    assert stats.completions_percent is None
    assert stats.current_streak is None
    assert stats.uncompleted_days is None


def test_period_progress_before_creation_uses_the_clipped_week():
    rule = RecurrenceRule(FrequencyType.WEEKLY_X_TIMES, JAN_1, times_per_week=3)
    progress = statistics.period_progress(rule, {d(2)}, date(2024, 12, 30))
    assert (progress.completed, progress.planned) == (1, 3)
    assert (progress.window.start, progress.window.end) == (d(1), d(5))
