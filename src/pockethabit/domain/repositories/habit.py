"""Habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Repository for managing habit definitions."""

    def get_all(self) -> list[Habit]:
        """List every habit, paused or not."""
        ...

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Replace an existing habit (full replace semantics)."""
        ...

    def delete(self, habit_id: str) -> None:
        """Delete a habit and cascade its logs."""
        ...

    def update_notification_ids(self, habit_id: str, notification_ids: list[str]) -> None:
        """Persist the scheduler ids currently attached to a habit."""
        ...
