from __future__ import annotations
from datetime import date
from typing import Optional


class HabitEngineError(Exception):
    """Base class for every error raised by the engine."""


class InvalidRuleError(HabitEngineError, ValueError):
    """Malformed recurrence configuration (empty day set, non-positive count, ...)."""


class NotFoundError(HabitEngineError, LookupError):
    """Unknown habit, or no completion report where one was expected."""


class DuplicateCompletionError(HabitEngineError):
    def __init__(self, habit_id: int, day: date):
        self.habit_id = habit_id
        self.day = day
        super().__init__(f"Habit {habit_id} has already been marked as completed on {day.isoformat()}")


class DuplicateHabitError(HabitEngineError):
    def __init__(self, user_id: int, name: str):
        self.user_id = user_id
        self.name = name
        super().__init__(f"User {user_id} already has a habit named '{name}'")


class CompletionNotAllowedError(HabitEngineError):
    """Completion rejected: future date, or a photo on a habit that doesn't take photos."""

    def __init__(self, message: str, habit_id: Optional[int] = None):
        self.habit_id = habit_id
        super().__init__(message)
