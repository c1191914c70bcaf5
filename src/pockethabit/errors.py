"""Exceptions raised by PocketHabit services."""

from __future__ import annotations


class PocketHabitError(Exception):
    """Base class for PocketHabit errors."""


class HabitNotFoundError(PocketHabitError, LookupError):
    """A habit id did not resolve in the habit repository."""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit {habit_id!r} does not exist")
        self.habit_id = habit_id


class InvalidInputError(PocketHabitError, ValueError):
    """User-supplied values (habit fields, dates) were rejected before a write."""


__all__ = ["HabitNotFoundError", "InvalidInputError", "PocketHabitError"]
