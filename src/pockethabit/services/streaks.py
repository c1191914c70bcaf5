"""Streak calculations for daily, weekly and monthly habits.

Only dates the habit is due on take part in a streak: unscheduled dates are
skipped rather than breaking or extending a run. Dates are compared as
``YYYY-MM-DD`` strings throughout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from ..domain.calendar import (
    dates_in_week,
    is_valid_date,
    iso_week_key,
    previous_date,
    previous_week_key,
    week_key_sort_key,
)
from ..domain.schedule import WeeklySchedule, is_due_on
from ..models.habit import Habit, HabitLog, log_counts_as_done

logger = logging.getLogger("pockethabit.streaks")

# Roughly five years of calendar days.
DEFAULT_LOOKBACK_DAYS = 1830


@dataclass(slots=True, frozen=True)
class HabitStreaks:
    """Current/best runs of consecutive satisfied days and weeks."""

    current_daily: int = 0
    best_daily: int = 0
    current_weekly: int = 0
    best_weekly: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "currentDaily": self.current_daily,
            "bestDaily": self.best_daily,
            "currentWeekly": self.current_weekly,
            "bestWeekly": self.best_weekly,
        }


def index_logs(logs: Iterable[HabitLog]) -> dict[str, HabitLog]:
    """Map date -> log, skipping rows whose date is malformed."""

    by_date: dict[str, HabitLog] = {}
    for log in logs:
        if not is_valid_date(log.date):
            logger.warning(
                "Skipping log with malformed date",
                extra={"habit_id": log.habit_id, "log_date": repr(log.date)},
            )
            continue
        by_date[log.date] = log
    return by_date


def _is_done(by_date: Mapping[str, HabitLog], date_str: str, target: int) -> bool:
    log = by_date.get(date_str)
    return log is not None and log_counts_as_done(log, target)


def best_daily_streak(habit: Habit, by_date: Mapping[str, HabitLog]) -> int:
    """Longest run over logged, scheduled dates.

    Dates never logged are invisible; a logged-but-not-done scheduled date
    resets the run.
    """

    target = habit.targets
    best = run = 0
    for date_str in sorted(by_date):
        if not is_due_on(habit, date_str):
            continue
        if log_counts_as_done(by_date[date_str], target):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def current_daily_streak(
    habit: Habit,
    by_date: Mapping[str, HabitLog],
    today: str,
    *,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> int:
    """Consecutive scheduled+done dates walking backward from ``today``.

    The walk stops at the first scheduled date that is missing or not done,
    once it passes the earliest logged date, or after ``lookback_days`` steps.
    """

    if not by_date or not is_valid_date(today):
        return 0

    target = habit.targets
    earliest = min(by_date)
    streak = 0
    cursor = today
    for _ in range(max(lookback_days, 1)):
        if cursor < earliest:
            break
        if is_due_on(habit, cursor):
            if not _is_done(by_date, cursor, target):
                break
            streak += 1
        previous = previous_date(cursor)
        if previous == cursor:
            # 0001-01-01 has no previous day.
            break
        cursor = previous
    return streak


def is_week_complete(habit: Habit, by_date: Mapping[str, HabitLog], week_key: str) -> bool:
    """A week is complete when it has scheduled dates and every one of them is done."""

    target = habit.targets
    scheduled = [d for d in dates_in_week(week_key) if is_due_on(habit, d)]
    if not scheduled:
        return False
    return all(_is_done(by_date, d, target) for d in scheduled)


def best_weekly_streak(habit: Habit, by_date: Mapping[str, HabitLog]) -> int:
    """Longest run of complete weeks among the weeks that contain a log."""

    week_keys = sorted({iso_week_key(d) for d in by_date}, key=week_key_sort_key)
    best = run = 0
    for week_key in week_keys:
        if is_week_complete(habit, by_date, week_key):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def current_weekly_streak(habit: Habit, by_date: Mapping[str, HabitLog], today: str) -> int:
    """Complete weeks counted backward from the week containing ``today``."""

    if not by_date:
        return 0
    week_key = iso_week_key(today)
    earliest_key = week_key_sort_key(iso_week_key(min(by_date)))
    streak = 0
    # Weeks before the first logged week can never be complete.
    while week_key and week_key_sort_key(week_key) >= earliest_key:
        if not is_week_complete(habit, by_date, week_key):
            break
        streak += 1
        week_key = previous_week_key(week_key)
    return streak


def compute_streaks(
    habit: Habit,
    logs: Iterable[HabitLog],
    today: str,
    *,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> HabitStreaks:
    """Compute current/best daily streaks and, for weekly habits, weekly streaks."""

    if not is_valid_date(today):
        logger.warning("Malformed reference date, returning empty streaks", extra={"today": repr(today)})
        return HabitStreaks()

    by_date = index_logs(log for log in logs if log.habit_id == habit.id)

    current_daily = current_daily_streak(habit, by_date, today, lookback_days=lookback_days)
    best_daily = best_daily_streak(habit, by_date)

    if not isinstance(habit.schedule, WeeklySchedule):
        return HabitStreaks(current_daily=current_daily, best_daily=best_daily)

    return HabitStreaks(
        current_daily=current_daily,
        best_daily=best_daily,
        current_weekly=current_weekly_streak(habit, by_date, today),
        best_weekly=best_weekly_streak(habit, by_date),
    )


__all__ = [
    "DEFAULT_LOOKBACK_DAYS",
    "HabitStreaks",
    "best_daily_streak",
    "best_weekly_streak",
    "compute_streaks",
    "current_daily_streak",
    "current_weekly_streak",
    "index_logs",
    "is_week_complete",
]
