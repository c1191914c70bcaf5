"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelHabitRepository
from .log import SQLModelHabitLogRepository
from .settings import SQLModelSettingsRepository

__all__ = [
    "SQLModelHabitLogRepository",
    "SQLModelHabitRepository",
    "SQLModelSettingsRepository",
]
