"""Habit tracking data structures."""

from __future__ import annotations

import json
from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from ..domain.schedule import (
    EndCondition,
    Schedule,
    end_condition_from_json,
    end_condition_to_json,
    schedule_from_columns,
    schedule_to_columns,
)

PAUSE_MANUAL = "manual"
PAUSE_ENDED = "ended"


class Habit(SQLModel, table=True):
    """A recurring task definition.

    The schedule and end condition are stored as plain columns (type + JSON)
    and exposed as typed values through ``schedule`` / ``end_condition``;
    corrupt stored values heal to ``daily`` / open-ended on read.
    """

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(nullable=False, max_length=80, index=True)
    icon: str = Field(default="", max_length=16)
    color: str = Field(default="#4F46E5", max_length=16)

    schedule_type: str = Field(default="daily", max_length=16)
    schedule_days: str = Field(default="[]", max_length=255)
    end_condition_json: Optional[str] = Field(default=None, max_length=64)

    start_time: str = Field(default="08:00", max_length=5)
    end_time: str = Field(default="09:00", max_length=5)
    reminder_offset_minutes: Optional[int] = Field(default=None)

    is_paused: bool = Field(default=False, nullable=False)
    paused_at: Optional[str] = Field(default=None, max_length=10)
    pause_reason: Optional[str] = Field(default=None, max_length=16)

    target_repeats: int = Field(default=1, nullable=False)
    notification_ids_json: str = Field(default="[]")

    @property
    def schedule(self) -> Schedule:
        return schedule_from_columns(self.schedule_type, self.schedule_days)

    def set_schedule(self, schedule: Schedule) -> None:
        self.schedule_type, self.schedule_days = schedule_to_columns(schedule)

    @property
    def end_condition(self) -> EndCondition:
        return end_condition_from_json(self.end_condition_json)

    def set_end_condition(self, end: EndCondition) -> None:
        self.end_condition_json = end_condition_to_json(end)

    @property
    def targets(self) -> int:
        """Completions required per date, never below 1."""

        return self.target_repeats if self.target_repeats and self.target_repeats > 0 else 1

    @property
    def notification_ids(self) -> list[str]:
        try:
            ids = json.loads(self.notification_ids_json or "[]")
        except ValueError:
            return []
        return [str(i) for i in ids] if isinstance(ids, list) else []

    def set_notification_ids(self, ids: list[str]) -> None:
        self.notification_ids_json = json.dumps(list(ids))


class HabitLog(SQLModel, table=True):
    """Progress/completion record for one habit on one calendar date."""

    __tablename__: ClassVar[str] = "habit_log"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_log_habit_date"),)

    id: str = Field(primary_key=True, max_length=80)
    habit_id: str = Field(foreign_key="habit.id", nullable=False, index=True, max_length=64)
    date: str = Field(nullable=False, index=True, max_length=10)
    done: bool = Field(default=False, nullable=False)
    progress: int = Field(default=0, nullable=False)
    completed_at: Optional[datetime] = Field(default=None)


def build_log_id(habit_id: str, date: str) -> str:
    """Deterministic log id: one row per (habit, date)."""

    return f"{habit_id}:{date}"


def log_counts_as_done(log: HabitLog, target_repeats: int = 1) -> bool:
    """Done when flagged done or when progress has reached the target."""

    if log.done:
        return True
    return (log.progress or 0) >= max(target_repeats, 1)


__all__ = [
    "Habit",
    "HabitLog",
    "PAUSE_ENDED",
    "PAUSE_MANUAL",
    "build_log_id",
    "log_counts_as_done",
]
