"""SQLModel implementation of the habit repository."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from ...errors import HabitNotFoundError
from ...models.habit import Habit, HabitLog

logger = logging.getLogger("pockethabit.repositories.habit")


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_all(self) -> list[Habit]:
        with self.session_factory() as session:
            rows = list(
                session.exec(select(Habit).order_by(Habit.start_time, Habit.name)).all()  # type: ignore
            )
            session.expunge_all()
            return rows

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(self, habit: Habit) -> Habit:
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            logger.info("Habit created", extra={"habit_id": habit.id})
            return habit

    def update(self, habit: Habit) -> Habit:
        """Replace every column of an existing habit."""
        with self.session_factory() as session:
            if session.get(Habit, habit.id) is None:
                raise HabitNotFoundError(habit.id)
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: str) -> None:
        """Delete a habit together with all of its logs."""
        with self.session_factory() as session:
            session.connection().execute(delete(HabitLog).where(HabitLog.habit_id == habit_id))
            habit = session.get(Habit, habit_id)
            if habit:
                session.delete(habit)
            session.commit()
            logger.info("Habit deleted", extra={"habit_id": habit_id})

    def update_notification_ids(self, habit_id: str, notification_ids: list[str]) -> None:
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return
            habit.set_notification_ids(notification_ids)
            session.add(habit)
            session.commit()


__all__ = ["SQLModelHabitRepository"]
