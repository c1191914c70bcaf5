"""Per-day, weekly, monthly and full-history completion summaries.

Everything here is a pure function of the habits and logs passed in, so the
same inputs always produce the same output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ..domain.calendar import (
    add_days,
    day_of_week,
    format_local_date,
    is_valid_date,
    iter_dates,
    month_length,
    months_back,
    parse_local_date,
    previous_date,
    week_start,
)
from ..domain.labels import DEFAULT_LOCALE, month_label, weekday_label
from ..domain.schedule import is_due_on
from ..models.habit import Habit, HabitLog, log_counts_as_done
from .streaks import DEFAULT_LOOKBACK_DAYS, current_daily_streak, index_logs

logger = logging.getLogger("pockethabit.summaries")


class DayState(str, Enum):
    """Classification of one calendar day for a single habit."""

    DONE = "done"
    MISSED = "missed"
    FUTURE = "future"
    UNSCHEDULED = "unscheduled"


@dataclass(slots=True)
class DueHabit:
    habit: Habit
    done: bool


@dataclass(slots=True)
class DaySummary:
    date: str
    label: str
    total_planned: int
    total_done: int
    completion_rate: float


@dataclass(slots=True)
class MonthlyDay:
    date: str
    day_of_month: int
    is_scheduled: bool
    done: bool
    state: DayState

    @property
    def togglable(self) -> bool:
        """Only past/present scheduled days may be toggled from the calendar."""
        return self.state in (DayState.DONE, DayState.MISSED)


@dataclass(slots=True)
class MonthlyCalendar:
    habit_id: str
    year: int
    month: int
    days: list[MonthlyDay] = field(default_factory=list)
    scheduled_days: int = 0
    done_days: int = 0
    missed_days: int = 0
    completion_rate: float = 0.0
    current_monthly_streak: int = 0
    best_monthly_streak: int = 0


@dataclass(slots=True)
class WeekGroup:
    week_start: str
    days: list[DaySummary] = field(default_factory=list)


@dataclass(slots=True)
class MonthGroup:
    year: int
    month: int
    label: str
    weeks: list[WeekGroup] = field(default_factory=list)


@dataclass(slots=True)
class HistoryPage:
    """One page of history: months newest first, weeks newest first, days oldest first."""

    months: list[MonthGroup]
    from_date: Optional[str]
    to_date: str
    has_more: bool = False
    next_before: Optional[str] = None

    @property
    def total_months(self) -> int:
        return len(self.months)


class LogIndex:
    """Lookup of logs by (habit id, date)."""

    def __init__(self, logs: Iterable[HabitLog]):
        self._logs: dict[tuple[str, str], HabitLog] = {}
        for log in logs:
            self._logs[(log.habit_id, log.date)] = log

    def get(self, habit_id: str, date_str: str) -> Optional[HabitLog]:
        return self._logs.get((habit_id, date_str))

    def is_done(self, habit: Habit, date_str: str) -> bool:
        log = self._logs.get((habit.id, date_str))
        return log is not None and log_counts_as_done(log, habit.targets)


def is_active_on(habit: Habit, date_str: str) -> bool:
    """False for a paused habit on or after the date it was paused."""

    if not habit.is_paused:
        return True
    if habit.paused_at and is_valid_date(habit.paused_at):
        return date_str < habit.paused_at
    return False


def is_planned(habit: Habit, date_str: str) -> bool:
    """Due by schedule/end date and not paused on that date."""

    return is_active_on(habit, date_str) and is_due_on(habit, date_str)


def _completion_rate(done: int, planned: int) -> float:
    return done / planned if planned else 0.0


def habits_due_on(date_str: str, habits: Iterable[Habit], logs_for_date: Iterable[HabitLog]) -> list[DueHabit]:
    """Habits planned for ``date_str`` paired with their done flag."""

    index = LogIndex(log for log in logs_for_date if log.date == date_str)
    return [
        DueHabit(habit=habit, done=index.is_done(habit, date_str))
        for habit in habits
        if is_planned(habit, date_str)
    ]


def summarize_day(
    date_str: str, habits: list[Habit], index: LogIndex, locale: str = DEFAULT_LOCALE
) -> DaySummary:
    planned = [habit for habit in habits if is_planned(habit, date_str)]
    done = sum(1 for habit in planned if index.is_done(habit, date_str))
    return DaySummary(
        date=date_str,
        label=weekday_label(day_of_week(date_str), locale),
        total_planned=len(planned),
        total_done=done,
        completion_rate=_completion_rate(done, len(planned)),
    )


def weekly_summary(
    reference_date: str,
    habits: Iterable[Habit],
    logs: Iterable[HabitLog],
    *,
    locale: str = DEFAULT_LOCALE,
) -> list[DaySummary]:
    """Summaries for the 7 days ending at ``reference_date``, oldest first."""

    if not is_valid_date(reference_date):
        return []
    habit_list = list(habits)
    index = LogIndex(logs)
    dates = iter_dates(add_days(reference_date, -6), reference_date)
    return [summarize_day(d, habit_list, index, locale) for d in dates]


def monthly_calendar(
    habit: Habit,
    year: int,
    month: int,
    logs: Iterable[HabitLog],
    today: str,
    *,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> MonthlyCalendar:
    """Classify each day of a month as done / missed / future / unscheduled.

    ``current_monthly_streak`` is the daily streak as of ``today``.
    ``best_monthly_streak`` is the longest streak ending on a done day of this
    month, counted backward across month boundaries.
    """

    result = MonthlyCalendar(habit_id=habit.id, year=year, month=month)
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        return result
    if not is_valid_date(today):
        logger.warning("Malformed reference date, returning empty calendar", extra={"today": repr(today)})
        return result

    habit_logs = [log for log in logs if log.habit_id == habit.id]
    index = LogIndex(habit_logs)
    for day in range(1, month_length(year, month) + 1):
        date_str = format_local_date(year, month, day)
        scheduled = is_due_on(habit, date_str)
        done = index.is_done(habit, date_str)

        if not scheduled:
            state = DayState.UNSCHEDULED
        elif date_str > today:
            state = DayState.FUTURE
        elif done:
            state = DayState.DONE
        else:
            state = DayState.MISSED

        if scheduled:
            result.scheduled_days += 1
            if state is DayState.DONE:
                result.done_days += 1
            elif state is DayState.MISSED:
                result.missed_days += 1

        result.days.append(
            MonthlyDay(
                date=date_str,
                day_of_month=day,
                is_scheduled=scheduled,
                done=done,
                state=state,
            )
        )

    result.completion_rate = _completion_rate(result.done_days, result.scheduled_days)

    by_date = index_logs(habit_logs)
    result.current_monthly_streak = current_daily_streak(habit, by_date, today, lookback_days=lookback_days)
    for day in result.days:
        if day.is_scheduled and day.done:
            result.best_monthly_streak = max(
                result.best_monthly_streak,
                current_daily_streak(habit, by_date, day.date, lookback_days=lookback_days),
            )
    return result


def resolve_history_start(
    from_date: str,
    to_date: str,
    earliest_log_date: Optional[str],
    *,
    clamp_to_first_log: bool = True,
) -> str:
    """First date a history view may show.

    With clamping on, nothing before the first log is shown; without any log
    at all the view starts at the Monday of ``to_date``'s week.
    """

    if not clamp_to_first_log:
        return from_date
    if earliest_log_date and is_valid_date(earliest_log_date):
        return max(from_date, earliest_log_date)
    return max(from_date, week_start(to_date))


def full_history(
    from_date: str,
    to_date: str,
    habits: Iterable[Habit],
    logs: Iterable[HabitLog],
    *,
    earliest_log_date: Optional[str] = None,
    clamp_to_first_log: bool = True,
    locale: str = DEFAULT_LOCALE,
) -> HistoryPage:
    """Day summaries between two dates grouped into weeks within months."""

    if not is_valid_date(from_date) or not is_valid_date(to_date):
        return HistoryPage(months=[], from_date=None, to_date=to_date)

    start = resolve_history_start(
        from_date, to_date, earliest_log_date, clamp_to_first_log=clamp_to_first_log
    )
    dates = iter_dates(start, to_date)
    if not dates:
        return HistoryPage(months=[], from_date=None, to_date=to_date)

    habit_list = list(habits)
    index = LogIndex(logs)

    weeks: dict[str, WeekGroup] = {}
    for date_str in dates:
        key = week_start(date_str)
        weeks.setdefault(key, WeekGroup(week_start=key)).days.append(
            summarize_day(date_str, habit_list, index, locale)
        )

    months: dict[tuple[int, int], MonthGroup] = {}
    for key in sorted(weeks, reverse=True):
        week = weeks[key]
        # A week spanning two months belongs to the month of its first shown day.
        first = parse_local_date(week.days[0].date)
        month_key = (first.year, first.month)
        if month_key not in months:
            months[month_key] = MonthGroup(
                year=first.year, month=first.month, label=month_label(first.year, first.month, locale)
            )
        months[month_key].weeks.append(week)

    ordered = [months[key] for key in sorted(months, reverse=True)]
    return HistoryPage(months=ordered, from_date=start, to_date=to_date)


def history_window(to_date: str, months_per_page: int) -> tuple[str, str]:
    """Inclusive ``(from, to)`` covering ``months_per_page`` calendar months ending at ``to_date``."""

    end = parse_local_date(to_date)
    if end is None:
        return to_date, to_date
    year, month = months_back(end.year, end.month, max(months_per_page, 1) - 1)
    return format_local_date(year, month, 1), to_date


def paginate_history(
    habits: Iterable[Habit],
    logs: Iterable[HabitLog],
    *,
    today: str,
    before: Optional[str] = None,
    months_per_page: int = 3,
    earliest_log_date: Optional[str] = None,
    locale: str = DEFAULT_LOCALE,
) -> HistoryPage:
    """One backward page of history ending the day before ``before`` (or at ``today``)."""

    to_date = previous_date(before) if before else today
    from_date, to_date = history_window(to_date, months_per_page)
    page = full_history(
        from_date,
        to_date,
        habits,
        logs,
        earliest_log_date=earliest_log_date,
        locale=locale,
    )
    if page.from_date is not None:
        page.has_more = earliest_log_date is not None and earliest_log_date < page.from_date
        page.next_before = page.from_date if page.has_more else None
    return page


__all__ = [
    "DayState",
    "DaySummary",
    "DueHabit",
    "HistoryPage",
    "LogIndex",
    "MonthGroup",
    "MonthlyCalendar",
    "MonthlyDay",
    "WeekGroup",
    "full_history",
    "habits_due_on",
    "history_window",
    "is_active_on",
    "is_planned",
    "monthly_calendar",
    "paginate_history",
    "resolve_history_start",
    "summarize_day",
    "weekly_summary",
]
