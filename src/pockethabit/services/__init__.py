"""Domain services: streaks, summaries, habit use cases, reminders and settings."""

from .habits import HabitDraft, HabitService
from .settings import ReminderSettings, SettingsService
from .streaks import HabitStreaks, compute_streaks
from .summaries import full_history, habits_due_on, monthly_calendar, weekly_summary

__all__ = [
    "HabitDraft",
    "HabitService",
    "HabitStreaks",
    "ReminderSettings",
    "SettingsService",
    "compute_streaks",
    "full_history",
    "habits_due_on",
    "monthly_calendar",
    "weekly_summary",
]
