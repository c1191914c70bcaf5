"""Reminder planning and the notification scheduler boundary.

Delivery is somebody else's job; this module decides *when* a habit should
remind, using the same due-date rules as the rest of the app.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..domain.calendar import add_days, is_valid_date
from ..domain.schedule import Schedule, is_due_on
from ..models.habit import Habit

logger = logging.getLogger("pockethabit.notifications")

_HM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
DEFAULT_REMINDER_TIME = (9, 0)
MINUTES_PER_DAY = 24 * 60


def parse_hm(value: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse ``HH:mm``; ``None`` when malformed or out of range."""

    match = _HM_RE.match(value or "")
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def reminder_time(start_time: Optional[str], offset_minutes: Optional[int]) -> str:
    """``start_time`` minus ``offset_minutes``, wrapped into 00:00-23:59."""

    hour, minute = parse_hm(start_time) or DEFAULT_REMINDER_TIME
    total = (hour * 60 + minute - (offset_minutes or 0)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


@dataclass(slots=True)
class NotificationPlan:
    habit_id: str
    name: str
    icon: str
    start_time: str
    schedule: Schedule
    reminder_offset_minutes: Optional[int] = None

    @property
    def fire_time(self) -> str:
        return reminder_time(self.start_time, self.reminder_offset_minutes)


@dataclass(slots=True, frozen=True)
class Reminder:
    date: str
    time: str


def build_plan(habit: Habit) -> NotificationPlan:
    return NotificationPlan(
        habit_id=habit.id,
        name=habit.name,
        icon=habit.icon,
        start_time=habit.start_time or "08:00",
        schedule=habit.schedule,
        reminder_offset_minutes=habit.reminder_offset_minutes,
    )


def upcoming_reminders(habit: Habit, from_date: str, horizon_days: int) -> list[Reminder]:
    """Reminders on every due date in ``[from_date, from_date + horizon_days)``."""

    if not is_valid_date(from_date) or horizon_days <= 0:
        return []
    fire_at = reminder_time(habit.start_time, habit.reminder_offset_minutes)
    reminders = []
    for offset in range(horizon_days):
        date_str = add_days(from_date, offset)
        if is_due_on(habit, date_str):
            reminders.append(Reminder(date=date_str, time=fire_at))
    return reminders


class NotificationScheduler(Protocol):
    """Schedules reminders for a habit and cancels them by id or by habit."""

    def schedule_for_habit(self, habit: Habit, *, from_date: str, horizon_days: int = 30) -> list[str]:
        ...

    def cancel(self, notification_ids: list[str]) -> None:
        ...

    def cancel_by_habit_id(self, habit_id: str) -> None:
        ...


@dataclass
class InMemoryNotificationScheduler:
    """Keeps planned reminders in memory; used by the CLI and tests."""

    scheduled: dict[str, tuple[str, Reminder]] = field(default_factory=dict)

    def schedule_for_habit(self, habit: Habit, *, from_date: str, horizon_days: int = 30) -> list[str]:
        ids = []
        for reminder in upcoming_reminders(habit, from_date, horizon_days):
            notification_id = uuid.uuid4().hex
            self.scheduled[notification_id] = (habit.id, reminder)
            ids.append(notification_id)
        logger.info(
            "Reminders scheduled",
            extra={"habit_id": habit.id, "count": len(ids), "time": build_plan(habit).fire_time},
        )
        return ids

    def cancel(self, notification_ids: list[str]) -> None:
        for notification_id in notification_ids:
            self.scheduled.pop(notification_id, None)

    def cancel_by_habit_id(self, habit_id: str) -> None:
        stale = [nid for nid, (owner, _) in self.scheduled.items() if owner == habit_id]
        self.cancel(stale)

    def reminders_for(self, habit_id: str) -> list[Reminder]:
        return sorted(
            (reminder for owner, reminder in self.scheduled.values() if owner == habit_id),
            key=lambda r: r.date,
        )


__all__ = [
    "InMemoryNotificationScheduler",
    "NotificationPlan",
    "NotificationScheduler",
    "Reminder",
    "build_plan",
    "parse_hm",
    "reminder_time",
    "upcoming_reminders",
]
