from enum import Enum
from typing import Optional, List, Set
from datetime import datetime, date, timezone
from sqlmodel import SQLModel, Field, Column, JSON, UniqueConstraint
from sqlalchemy import DateTime


class FrequencyType(str, Enum):
    WEEKLY_ON_DAYS = "WEEKLY_ON_DAYS"
    WEEKLY_X_TIMES = "WEEKLY_X_TIMES"
    MONTHLY_X_TIMES = "MONTHLY_X_TIMES"


class Weekday(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class Habit(SQLModel, table=True):
    """
    User habit with its recurrence configuration.
    """
    __tablename__ = "habits"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_habits_user_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)

    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)

    is_photo_allowed: bool = Field(default=False)
    is_harmful: bool = Field(default=False)
    duration_days: Optional[int] = Field(default=None)  # None = no end date

    frequency_type: FrequencyType = Field(index=True)
    # Weekday names; only for WEEKLY_ON_DAYS
    days_of_week: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    times_per_week: Optional[int] = Field(default=None)   # only for WEEKLY_X_TIMES
    times_per_month: Optional[int] = Field(default=None)  # only for MONTHLY_X_TIMES

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    @property
    def weekdays(self) -> Set[Weekday]:
        return {Weekday(d) for d in (self.days_of_week or [])}


class CompletionReport(SQLModel, table=True):
    """
    One completed day of a habit. At most one row per (habit_id, report_date).
    """
    __tablename__ = "completion_reports"
    __table_args__ = (UniqueConstraint("habit_id", "report_date", name="uq_completion_reports_habit_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(index=True, foreign_key="habits.id")

    report_date: date = Field(index=True)
    completion_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    photo_url: Optional[str] = Field(default=None, max_length=2048)
