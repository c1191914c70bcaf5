"""SQLModel implementation of the habit log repository.

``toggle`` and ``increment_progress`` are single conditional UPDATE statements
(with an INSERT when the row does not exist yet), so two writers racing on the
same (habit, date) cannot lose each other's update.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import case, func, literal, null, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...models.habit import HabitLog, build_log_id

logger = logging.getLogger("pockethabit.repositories.log")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp(value: datetime):
    """Bind ``value`` with the ``completed_at`` column type inside SQL expressions."""
    return literal(value, type_=HabitLog.completed_at.type)


class SQLModelHabitLogRepository:
    """SQLModel-based habit log repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    # Reads

    def get_logs_for_date(self, date: str) -> list[HabitLog]:
        with self.session_factory() as session:
            rows = list(session.exec(select(HabitLog).where(HabitLog.date == date)).all())
            session.expunge_all()
            return rows

    def get_logs_for_habit(self, habit_id: str) -> list[HabitLog]:
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .order_by(HabitLog.date)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_logs_for_habit_since(self, habit_id: str, from_date: str) -> list[HabitLog]:
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .where(HabitLog.date >= from_date)
                .order_by(HabitLog.date)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_logs_between(self, from_date: str, to_date: str) -> list[HabitLog]:
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.date >= from_date)
                .where(HabitLog.date <= to_date)
                .order_by(HabitLog.date)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_earliest_log_date(self) -> Optional[str]:
        with self.session_factory() as session:
            return session.exec(select(func.min(HabitLog.date))).first()

    # Writes

    def _fetch(self, session: Session, habit_id: str, date: str) -> HabitLog:
        row = session.exec(
            select(HabitLog).where(HabitLog.habit_id == habit_id).where(HabitLog.date == date)
        ).one()
        session.expunge(row)
        return row

    def _update_or_insert(self, habit_id: str, date: str, statement, new_row: Callable[[], HabitLog]) -> HabitLog:
        """Run ``statement``; insert ``new_row()`` when it matched nothing."""

        with self.session_factory() as session:
            result = session.connection().execute(statement)
            if result.rowcount == 0:
                session.add(new_row())
                try:
                    session.commit()
                except IntegrityError:
                    # Another writer created the row first; apply the update on top of it.
                    session.rollback()
                    session.connection().execute(statement)
                    session.commit()
            else:
                session.commit()
            return self._fetch(session, habit_id, date)

    def toggle(self, habit_id: str, date: str, target_repeats: int = 1) -> HabitLog:
        target = max(int(target_repeats or 1), 1)
        now = _utcnow()
        becoming_done = HabitLog.done == False  # noqa: E712
        statement = (
            update(HabitLog)
            .where(HabitLog.habit_id == habit_id)
            .where(HabitLog.date == date)
            .values(
                done=case((becoming_done, True), else_=False),
                progress=case((becoming_done, target), else_=0),
                completed_at=case((becoming_done, _timestamp(now)), else_=null()),
            )
        )
        log = self._update_or_insert(
            habit_id,
            date,
            statement,
            lambda: HabitLog(
                id=build_log_id(habit_id, date),
                habit_id=habit_id,
                date=date,
                done=True,
                progress=target,
                completed_at=now,
            ),
        )
        logger.debug("Log toggled", extra={"habit_id": habit_id, "date": date, "done": log.done})
        return log

    def increment_progress(self, habit_id: str, date: str, target_repeats: int) -> HabitLog:
        target = max(int(target_repeats or 1), 1)
        now = _utcnow()
        bumped = HabitLog.progress + 1
        reached = bumped >= target
        statement = (
            update(HabitLog)
            .where(HabitLog.habit_id == habit_id)
            .where(HabitLog.date == date)
            .values(
                progress=case((reached, target), else_=bumped),
                done=case((reached, True), else_=False),
                completed_at=case(
                    (reached, func.coalesce(HabitLog.completed_at, _timestamp(now))), else_=null()
                ),
            )
        )
        log = self._update_or_insert(
            habit_id,
            date,
            statement,
            lambda: HabitLog(
                id=build_log_id(habit_id, date),
                habit_id=habit_id,
                date=date,
                done=target <= 1,
                progress=1,
                completed_at=now if target <= 1 else None,
            ),
        )
        logger.debug(
            "Progress incremented",
            extra={"habit_id": habit_id, "date": date, "progress": log.progress, "target": target},
        )
        return log

    def upsert_log(
        self,
        habit_id: str,
        date: str,
        done: bool,
        progress: Optional[int] = None,
        target_repeats: int = 1,
    ) -> HabitLog:
        """Insert or overwrite a log.

        A done log carries at least ``target_repeats`` progress and a log that
        is not done stays below it, so the flag and the counter never disagree.
        """
        target = max(int(target_repeats or 1), 1)
        value = max(int(progress), 0) if progress is not None else 0
        value = max(value, target) if done else min(value, target - 1)
        now = _utcnow()
        with self.session_factory() as session:
            existing = session.exec(
                select(HabitLog).where(HabitLog.habit_id == habit_id).where(HabitLog.date == date)
            ).first()

            if existing:
                if done and not existing.done:
                    existing.completed_at = now
                elif not done:
                    existing.completed_at = None
                existing.done = done
                existing.progress = value
                session.add(existing)
                session.commit()
                session.refresh(existing)
                session.expunge(existing)
                return existing

            entry = HabitLog(
                id=build_log_id(habit_id, date),
                habit_id=habit_id,
                date=date,
                done=done,
                progress=value,
                completed_at=now if done else None,
            )
            session.add(entry)
            session.commit()
            session.refresh(entry)
            session.expunge(entry)
            return entry


__all__ = ["SQLModelHabitLogRepository"]
