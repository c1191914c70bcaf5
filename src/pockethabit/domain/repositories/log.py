"""Habit log repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.habit import HabitLog


class HabitLogRepository(Protocol):
    """Repository for per-(habit, date) progress records."""

    def get_logs_for_date(self, date: str) -> list[HabitLog]:
        """All logs recorded on ``date``."""
        ...

    def get_logs_for_habit(self, habit_id: str) -> list[HabitLog]:
        """All logs of a habit, oldest first."""
        ...

    def get_logs_for_habit_since(self, habit_id: str, from_date: str) -> list[HabitLog]:
        """Logs of a habit on or after ``from_date``, oldest first."""
        ...

    def get_logs_between(self, from_date: str, to_date: str) -> list[HabitLog]:
        """Logs of every habit within an inclusive date range."""
        ...

    def get_earliest_log_date(self) -> Optional[str]:
        """Date of the first log ever recorded, or ``None``."""
        ...

    def toggle(self, habit_id: str, date: str, target_repeats: int = 1) -> HabitLog:
        """Flip ``done`` for a date, creating the row as done when absent."""
        ...

    def upsert_log(
        self,
        habit_id: str,
        date: str,
        done: bool,
        progress: Optional[int] = None,
        target_repeats: int = 1,
    ) -> HabitLog:
        """Insert or overwrite the log for a date, keeping ``done`` and ``progress`` consistent."""
        ...

    def increment_progress(self, habit_id: str, date: str, target_repeats: int) -> HabitLog:
        """Bump progress by one, clamped at the target; done once progress reaches it."""
        ...
