"""Habit schedules, end conditions and the due-date evaluator."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Optional, Protocol, Union

from .calendar import day_of_month, day_of_week, days_in_month, is_valid_date, parse_local_date

logger = logging.getLogger("pockethabit.schedule")

WEEKDAY_RANGE = (0, 6)
MONTH_DAY_RANGE = (1, 31)


def _clamp_days(values: Iterable[Any], low: int, high: int) -> frozenset[int]:
    days: set[int] = set()
    for value in values:
        if isinstance(value, bool):
            continue
        try:
            number = int(value)
        except (TypeError, ValueError):
            continue
        days.add(min(max(number, low), high))
    return frozenset(days)


def _stored_days(values: Iterable[Any], low: int, high: int) -> frozenset[int]:
    """Keep only in-range integers; stored values outside the range never match."""

    days: set[int] = set()
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        if low <= value <= high:
            days.add(value)
    return frozenset(days)


@dataclass(frozen=True)
class DailySchedule:
    """Due on every calendar date."""

    type: ClassVar[str] = "daily"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class WeeklySchedule:
    """Due on the listed weekdays (0=Sunday .. 6=Saturday)."""

    days_of_week: frozenset[int] = field(default_factory=frozenset)
    type: ClassVar[str] = "weekly"

    @classmethod
    def of(cls, days: Iterable[Any]) -> "WeeklySchedule":
        return cls(_clamp_days(days, *WEEKDAY_RANGE))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "daysOfWeek": sorted(self.days_of_week)}


@dataclass(frozen=True)
class MonthlySchedule:
    """Due on the listed days of the month (1..31)."""

    days_of_month: frozenset[int] = field(default_factory=frozenset)
    type: ClassVar[str] = "monthly"

    @classmethod
    def of(cls, days: Iterable[Any]) -> "MonthlySchedule":
        return cls(_clamp_days(days, *MONTH_DAY_RANGE))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "daysOfMonth": sorted(self.days_of_month)}


Schedule = Union[DailySchedule, WeeklySchedule, MonthlySchedule]


@dataclass(frozen=True)
class NoEndCondition:
    type: ClassVar[str] = "none"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class EndByDate:
    """Habit stops being due on any date after ``end_date`` (inclusive end)."""

    end_date: str
    type: ClassVar[str] = "byDate"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "endDate": self.end_date}


EndCondition = Union[NoEndCondition, EndByDate]


class Schedulable(Protocol):
    """Anything carrying a schedule and an end condition (usually ``models.Habit``)."""

    @property
    def schedule(self) -> Schedule: ...

    @property
    def end_condition(self) -> EndCondition: ...


# ---------------------------------------------------------------------------
# Deserialization: stored data never raises, it heals to safe defaults.
# ---------------------------------------------------------------------------


def schedule_from_dict(data: Any) -> Schedule:
    """Build a schedule from its JSON shape, falling back to daily."""

    if not isinstance(data, dict):
        logger.warning("Malformed schedule, defaulting to daily", extra={"raw": repr(data)})
        return DailySchedule()

    kind = data.get("type")
    if kind == "daily":
        return DailySchedule()
    if kind == "weekly":
        days = data.get("daysOfWeek")
        return WeeklySchedule(_stored_days(days if isinstance(days, list) else [], *WEEKDAY_RANGE))
    if kind == "monthly":
        days = data.get("daysOfMonth")
        return MonthlySchedule(_stored_days(days if isinstance(days, list) else [], *MONTH_DAY_RANGE))

    logger.warning("Unknown schedule type, defaulting to daily", extra={"schedule_type": kind})
    return DailySchedule()


def schedule_from_columns(schedule_type: Optional[str], schedule_days: Optional[str]) -> Schedule:
    """Rebuild a schedule from its two storage columns."""

    days: Any = []
    if schedule_days:
        try:
            days = json.loads(schedule_days)
        except ValueError:
            days = None
    if schedule_type in ("weekly", "monthly") and not isinstance(days, list):
        logger.warning(
            "Unparseable schedule days, defaulting to daily",
            extra={"schedule_type": schedule_type, "raw": schedule_days},
        )
        return DailySchedule()

    if schedule_type == "weekly":
        return schedule_from_dict({"type": "weekly", "daysOfWeek": days})
    if schedule_type == "monthly":
        return schedule_from_dict({"type": "monthly", "daysOfMonth": days})
    return schedule_from_dict({"type": schedule_type})


def schedule_to_columns(schedule: Schedule) -> tuple[str, str]:
    if isinstance(schedule, WeeklySchedule):
        return schedule.type, json.dumps(sorted(schedule.days_of_week))
    if isinstance(schedule, MonthlySchedule):
        return schedule.type, json.dumps(sorted(schedule.days_of_month))
    return DailySchedule.type, "[]"


def end_condition_from_dict(data: Any) -> EndCondition:
    if data is None:
        return NoEndCondition()
    if isinstance(data, dict):
        kind = data.get("type")
        if kind == "none":
            return NoEndCondition()
        if kind == "byDate" and is_valid_date(data.get("endDate")):
            return EndByDate(data["endDate"])
    logger.warning("Malformed end condition, treating as open-ended", extra={"raw": repr(data)})
    return NoEndCondition()


def end_condition_from_json(raw: Optional[str]) -> EndCondition:
    if not raw:
        return NoEndCondition()
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Unparseable end condition, treating as open-ended", extra={"raw": raw})
        return NoEndCondition()
    return end_condition_from_dict(data)


def end_condition_to_json(end: EndCondition) -> str:
    return json.dumps(end.to_dict())


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


def is_ended(end: EndCondition, date_str: str) -> bool:
    """True once ``date_str`` is strictly after the end date.

    ``YYYY-MM-DD`` strings order lexicographically the same as chronologically.
    """

    return isinstance(end, EndByDate) and date_str > end.end_date


def is_scheduled(schedule: Schedule, date_str: str) -> bool:
    """Schedule-only check, ignoring any end condition."""

    if parse_local_date(date_str) is None:
        return False

    if isinstance(schedule, WeeklySchedule):
        return day_of_week(date_str) in schedule.days_of_week

    if isinstance(schedule, MonthlySchedule):
        configured = {
            d
            for d in schedule.days_of_month
            if isinstance(d, int) and MONTH_DAY_RANGE[0] <= d <= MONTH_DAY_RANGE[1]
        }
        dom = day_of_month(date_str)
        if dom in configured:
            return True
        # A configured 31st (or 29th/30th) collapses onto the last day of shorter months.
        dim = days_in_month(date_str)
        return dom == dim and any(d > dim for d in configured)

    return True


def is_due_on(habit: Schedulable, date_str: str) -> bool:
    """Whether ``habit`` should be acted on for the calendar date ``date_str``."""

    if parse_local_date(date_str) is None:
        return False
    schedule = getattr(habit, "schedule", None)
    if not isinstance(schedule, (DailySchedule, WeeklySchedule, MonthlySchedule)):
        schedule = DailySchedule()
    end = getattr(habit, "end_condition", None)
    if isinstance(end, EndByDate) and is_ended(end, date_str):
        return False
    return is_scheduled(schedule, date_str)


def describe_schedule(schedule: Schedule, weekday_labels: Optional[list[str]] = None) -> str:
    """Short human description, e.g. ``weekly: Mon, Wed, Fri``."""

    if isinstance(schedule, WeeklySchedule):
        if weekday_labels:
            days = ", ".join(weekday_labels[d] for d in sorted(schedule.days_of_week))
        else:
            days = ", ".join(str(d) for d in sorted(schedule.days_of_week))
        return f"weekly: {days or '-'}"
    if isinstance(schedule, MonthlySchedule):
        days = ", ".join(str(d) for d in sorted(schedule.days_of_month))
        return f"monthly: {days or '-'}"
    return "daily"


__all__ = [
    "DailySchedule",
    "EndByDate",
    "EndCondition",
    "MonthlySchedule",
    "NoEndCondition",
    "Schedule",
    "Schedulable",
    "WeeklySchedule",
    "describe_schedule",
    "end_condition_from_dict",
    "end_condition_from_json",
    "end_condition_to_json",
    "is_due_on",
    "is_ended",
    "is_scheduled",
    "schedule_from_columns",
    "schedule_from_dict",
    "schedule_to_columns",
]
