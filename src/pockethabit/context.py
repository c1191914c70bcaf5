"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelHabitLogRepository,
    SQLModelHabitRepository,
    SQLModelSettingsRepository,
)
from .services.habits import HabitService
from .services.notifications import InMemoryNotificationScheduler, NotificationScheduler
from .services.settings import SettingsService


@dataclass
class AppContext:
    """Centralized application context with repositories and services."""

    config: BaseConfig
    session_factory: Callable[[], Session]

    habit_repo: SQLModelHabitRepository
    log_repo: SQLModelHabitLogRepository
    settings_repo: SQLModelSettingsRepository

    habits: HabitService
    settings: SettingsService
    notification_scheduler: NotificationScheduler


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    notification_scheduler: Optional[NotificationScheduler] = None,
) -> AppContext:
    """Create the engine, schema, repositories and services in one place."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    habit_repo = SQLModelHabitRepository(session_factory)
    log_repo = SQLModelHabitLogRepository(session_factory)
    settings_repo = SQLModelSettingsRepository(session_factory)
    scheduler = notification_scheduler or InMemoryNotificationScheduler()

    habits = HabitService(
        habit_repo,
        log_repo,
        scheduler,
        streak_lookback_days=config.STREAK_LOOKBACK_DAYS,
        reminder_horizon_days=config.REMINDER_HORIZON_DAYS,
        history_page_months=config.HISTORY_PAGE_MONTHS,
        locale=config.LOCALE,
    )

    return AppContext(
        config=config,
        session_factory=session_factory,
        habit_repo=habit_repo,
        log_repo=log_repo,
        settings_repo=settings_repo,
        habits=habits,
        settings=SettingsService(settings_repo),
        notification_scheduler=scheduler,
    )
