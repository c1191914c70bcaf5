"""Habit use cases: create/update/delete, logging progress, pausing, statistics."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from ..domain.calendar import add_days, day_of_week, is_valid_date, previous_date, today_ymd
from ..domain.repositories import HabitLogRepository, HabitRepository
from ..domain.schedule import (
    DailySchedule,
    EndByDate,
    EndCondition,
    MonthlySchedule,
    NoEndCondition,
    Schedule,
    WeeklySchedule,
    is_ended,
)
from ..errors import HabitNotFoundError, InvalidInputError
from ..models.habit import PAUSE_ENDED, PAUSE_MANUAL, Habit, HabitLog
from .notifications import NotificationScheduler, parse_hm
from .streaks import DEFAULT_LOOKBACK_DAYS, HabitStreaks, compute_streaks
from .summaries import (
    DaySummary,
    DueHabit,
    HistoryPage,
    MonthlyCalendar,
    habits_due_on,
    history_window,
    monthly_calendar,
    paginate_history,
    resolve_history_start,
    weekly_summary,
)

logger = logging.getLogger("pockethabit.habits")


@dataclass(slots=True)
class HabitDraft:
    """User input for creating a habit."""

    name: str
    schedule: Schedule
    icon: str = ""
    color: str = "#4F46E5"
    end_condition: EndCondition = NoEndCondition()
    start_time: str = "08:00"
    end_time: str = "09:00"
    reminder_offset_minutes: Optional[int] = None
    target_repeats: int = 1


def normalize_schedule(schedule: Schedule, today: str) -> Schedule:
    """Clamp day values; a weekly schedule without days falls back to today's weekday."""

    if isinstance(schedule, WeeklySchedule):
        normalized = WeeklySchedule.of(schedule.days_of_week)
        if not normalized.days_of_week:
            return WeeklySchedule.of([day_of_week(today)])
        return normalized
    if isinstance(schedule, MonthlySchedule):
        return MonthlySchedule.of(schedule.days_of_month)
    return DailySchedule()


def validate_habit(habit: Habit) -> None:
    """Reject habit fields that would corrupt stored data."""

    if not habit.name or not habit.name.strip():
        raise InvalidInputError("Habit name must not be blank")
    for label, value in (("start_time", habit.start_time), ("end_time", habit.end_time)):
        if parse_hm(value) is None:
            raise InvalidInputError(f"{label} must be HH:mm, got {value!r}")
    if habit.target_repeats is None or habit.target_repeats < 1:
        raise InvalidInputError("target_repeats must be at least 1")


def _require_date(date_str: str) -> str:
    if not is_valid_date(date_str):
        raise InvalidInputError(f"Date must be YYYY-MM-DD, got {date_str!r}")
    return date_str


def validate_end_condition(end: EndCondition) -> None:
    if isinstance(end, EndByDate) and not is_valid_date(end.end_date):
        raise InvalidInputError(f"End date must be YYYY-MM-DD, got {end.end_date!r}")


def _strict_end_condition(habit: Habit) -> EndCondition:
    """Read the end condition of an edited habit; malformed values raise instead of healing."""

    raw = habit.end_condition_json
    if not raw:
        return NoEndCondition()
    try:
        data = json.loads(raw)
    except ValueError:
        raise InvalidInputError(f"Malformed end condition {raw!r}") from None
    kind = data.get("type") if isinstance(data, dict) else None
    if kind == "none":
        return NoEndCondition()
    if kind == "byDate":
        end = EndByDate(data.get("endDate"))
        validate_end_condition(end)
        return end
    raise InvalidInputError(f"Malformed end condition {raw!r}")


class HabitService:
    """Coordinates the habit and log repositories with the notification scheduler."""

    def __init__(
        self,
        habit_repo: HabitRepository,
        log_repo: HabitLogRepository,
        notification_scheduler: Optional[NotificationScheduler] = None,
        *,
        streak_lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        reminder_horizon_days: int = 30,
        history_page_months: int = 3,
        locale: str = "en",
    ):
        self.habit_repo = habit_repo
        self.log_repo = log_repo
        self.notification_scheduler = notification_scheduler
        self.streak_lookback_days = streak_lookback_days
        self.reminder_horizon_days = reminder_horizon_days
        self.history_page_months = history_page_months
        self.locale = locale

    def require_habit(self, habit_id: str) -> Habit:
        habit = self.habit_repo.get_by_id(habit_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    # ------------------------------------------------------------------
    # Habit lifecycle
    # ------------------------------------------------------------------

    def create_habit(self, draft: HabitDraft, *, today: Optional[str] = None) -> Habit:
        today = today or today_ymd()
        validate_end_condition(draft.end_condition)

        habit = Habit(
            id=uuid.uuid4().hex,
            name=(draft.name or "").strip(),
            icon=draft.icon,
            color=draft.color,
            start_time=draft.start_time,
            end_time=draft.end_time,
            reminder_offset_minutes=draft.reminder_offset_minutes,
            target_repeats=draft.target_repeats,
        )
        habit.set_schedule(normalize_schedule(draft.schedule, today))
        habit.set_end_condition(draft.end_condition)
        validate_habit(habit)

        created = self.habit_repo.create(habit)
        self._schedule_reminders(created, today)
        return created

    def update_habit(self, habit: Habit, *, today: Optional[str] = None) -> Habit:
        """Full replace of a habit; reminders are re-planned for active habits."""

        today = today or today_ymd()
        _strict_end_condition(habit)
        current = self.require_habit(habit.id)
        habit.name = (habit.name or "").strip()
        habit.set_schedule(normalize_schedule(habit.schedule, today))
        validate_habit(habit)

        self._cancel_reminders(current)
        habit.set_notification_ids([])
        updated = self.habit_repo.update(habit)
        if not updated.is_paused:
            updated = self._schedule_reminders(updated, today)
        return updated

    def delete_habit(self, habit_id: str) -> None:
        """Cancel reminders, then delete the habit and all of its logs."""

        habit = self.habit_repo.get_by_id(habit_id)
        if habit is not None:
            self._cancel_reminders(habit)
        self.habit_repo.delete(habit_id)

    def set_habit_paused(
        self,
        habit_id: str,
        paused: bool,
        *,
        reason: str = PAUSE_MANUAL,
        today: Optional[str] = None,
    ) -> Habit:
        """Pause or resume a habit; an ended habit cannot be resumed."""

        today = today or today_ymd()
        habit = self.require_habit(habit_id)
        self._cancel_reminders(habit)
        habit.set_notification_ids([])

        if not paused and is_ended(habit.end_condition, today):
            habit.is_paused = True
            habit.paused_at = habit.paused_at or today
            habit.pause_reason = PAUSE_ENDED
            logger.info("Refusing to resume ended habit", extra={"habit_id": habit_id})
            return self.habit_repo.update(habit)

        if paused:
            habit.is_paused = True
            habit.paused_at = today
            habit.pause_reason = reason
            return self.habit_repo.update(habit)

        habit.is_paused = False
        habit.paused_at = None
        habit.pause_reason = None
        updated = self.habit_repo.update(habit)
        return self._schedule_reminders(updated, today)

    def auto_disable_expired_habits(self, *, today: Optional[str] = None) -> int:
        """Pause every habit whose end date has passed; idempotent."""

        today = today or today_ymd()
        disabled = 0
        for habit in self.habit_repo.get_all():
            if not is_ended(habit.end_condition, today):
                continue
            if habit.is_paused and habit.pause_reason == PAUSE_ENDED:
                continue
            self._cancel_reminders(habit)
            habit.set_notification_ids([])
            habit.is_paused = True
            habit.paused_at = today
            habit.pause_reason = PAUSE_ENDED
            self.habit_repo.update(habit)
            disabled += 1
        if disabled:
            logger.info("Expired habits disabled", extra={"count": disabled, "today": today})
        return disabled

    # ------------------------------------------------------------------
    # Logging progress
    # ------------------------------------------------------------------

    def toggle_habit_for_date(self, habit_id: str, date: str) -> HabitLog:
        habit = self.require_habit(habit_id)
        return self.log_repo.toggle(habit.id, _require_date(date), habit.targets)

    def toggle_habit_for_today(self, habit_id: str) -> HabitLog:
        return self.toggle_habit_for_date(habit_id, today_ymd())

    def increment_habit_progress(self, habit_id: str, date: str) -> HabitLog:
        habit = self.require_habit(habit_id)
        return self.log_repo.increment_progress(habit.id, _require_date(date), habit.targets)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_habit_streaks(self, habit_id: str, *, today: Optional[str] = None) -> HabitStreaks:
        habit = self.require_habit(habit_id)
        logs = self.log_repo.get_logs_for_habit(habit_id)
        return compute_streaks(
            habit, logs, today or today_ymd(), lookback_days=self.streak_lookback_days
        )

    def get_all_streaks(self, *, today: Optional[str] = None) -> dict[str, HabitStreaks]:
        today = today or today_ymd()
        return {
            habit.id: compute_streaks(
                habit,
                self.log_repo.get_logs_for_habit(habit.id),
                today,
                lookback_days=self.streak_lookback_days,
            )
            for habit in self.habit_repo.get_all()
        }

    def today_habits(self, date: Optional[str] = None) -> list[DueHabit]:
        date = date or today_ymd()
        return habits_due_on(date, self.habit_repo.get_all(), self.log_repo.get_logs_for_date(date))

    def weekly_summary(self, reference_date: Optional[str] = None) -> list[DaySummary]:
        reference_date = reference_date or today_ymd()
        logs = self.log_repo.get_logs_between(add_days(reference_date, -6), reference_date)
        return weekly_summary(reference_date, self.habit_repo.get_all(), logs, locale=self.locale)

    def monthly_stats(
        self, habit_id: str, year: int, month: int, *, today: Optional[str] = None
    ) -> MonthlyCalendar:
        today = _require_date(today) if today is not None else today_ymd()
        habit = self.require_habit(habit_id)
        logs = self.log_repo.get_logs_for_habit(habit_id)
        return monthly_calendar(
            habit, year, month, logs, today, lookback_days=self.streak_lookback_days
        )

    def history_page(
        self,
        *,
        before: Optional[str] = None,
        months: Optional[int] = None,
        today: Optional[str] = None,
    ) -> HistoryPage:
        """Load one page of history, walking backward from ``before`` (exclusive)."""

        today = today or today_ymd()
        habits = self.habit_repo.get_all()
        months = months or self.history_page_months
        earliest = self.log_repo.get_earliest_log_date()
        logs: Iterable[HabitLog] = []
        if earliest is not None:
            # Only the page window is loaded; older months come with later pages.
            from_date, to_date = history_window(previous_date(before) if before else today, months)
            start = resolve_history_start(from_date, to_date, earliest)
            if start <= to_date:
                logs = self.log_repo.get_logs_between(start, to_date)
        return paginate_history(
            habits,
            logs,
            today=today,
            before=before,
            months_per_page=months,
            earliest_log_date=earliest,
            locale=self.locale,
        )

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def _schedule_reminders(self, habit: Habit, today: str) -> Habit:
        if self.notification_scheduler is None or habit.is_paused:
            return habit
        ids = self.notification_scheduler.schedule_for_habit(
            habit, from_date=today, horizon_days=self.reminder_horizon_days
        )
        self.habit_repo.update_notification_ids(habit.id, ids)
        habit.set_notification_ids(ids)
        return habit

    def _cancel_reminders(self, habit: Habit) -> None:
        """Cancel by habit id and by stored ids; scheduler failures are logged, not raised."""

        if self.notification_scheduler is None:
            return
        try:
            self.notification_scheduler.cancel_by_habit_id(habit.id)
        except Exception:  # noqa: BLE001
            logger.warning("cancel_by_habit_id failed", exc_info=True, extra={"habit_id": habit.id})
        ids = habit.notification_ids
        if not ids:
            return
        try:
            self.notification_scheduler.cancel(ids)
        except Exception:  # noqa: BLE001
            logger.warning("cancel(ids) failed", exc_info=True, extra={"habit_id": habit.id})


__all__ = ["HabitDraft", "HabitService", "normalize_schedule", "validate_end_condition", "validate_habit"]
