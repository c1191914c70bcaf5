"""Pytest configuration and shared fixtures for PocketHabit tests.

Database fixtures use a throwaway SQLite file per test. Pure-logic tests build
``Habit`` / ``HabitLog`` objects in memory through the builder fixtures.
"""

from __future__ import annotations

from typing import Optional

import pytest
from sqlmodel import SQLModel

from pockethabit import models  # noqa: F401  # register tables with SQLModel metadata
from pockethabit.config import TestConfig
from pockethabit.context import create_app_context
from pockethabit.domain.schedule import DailySchedule, EndCondition, Schedule
from pockethabit.infra.database import create_db_engine, create_session_factory
from pockethabit.infra.repositories import (
    SQLModelHabitLogRepository,
    SQLModelHabitRepository,
    SQLModelSettingsRepository,
)
from pockethabit.models.habit import Habit, HabitLog, build_log_id
from pockethabit.services.habits import HabitService
from pockethabit.services.notifications import InMemoryNotificationScheduler

# =============================================================================
# In-memory builders
# =============================================================================


@pytest.fixture
def habit_builder():
    """Build detached Habit objects without touching a database."""

    def _build(
        habit_id: str = "habit-1",
        schedule: Schedule = DailySchedule(),
        end: Optional[EndCondition] = None,
        name: str = "Read",
        target_repeats: int = 1,
        is_paused: bool = False,
        paused_at: Optional[str] = None,
        start_time: str = "08:00",
        reminder_offset_minutes: Optional[int] = None,
    ) -> Habit:
        habit = Habit(
            id=habit_id,
            name=name,
            target_repeats=target_repeats,
            is_paused=is_paused,
            paused_at=paused_at,
            start_time=start_time,
            reminder_offset_minutes=reminder_offset_minutes,
        )
        habit.set_schedule(schedule)
        if end is not None:
            habit.set_end_condition(end)
        return habit

    return _build


@pytest.fixture
def log_builder():
    """Build detached HabitLog rows."""

    def _build(
        habit_id: str,
        date: str,
        done: bool = True,
        progress: Optional[int] = None,
    ) -> HabitLog:
        return HabitLog(
            id=build_log_id(habit_id, date),
            habit_id=habit_id,
            date=date,
            done=done,
            progress=(1 if done else 0) if progress is None else progress,
        )

    return _build


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def test_config(tmp_path):
    return TestConfig(data_dir=tmp_path / "data")


@pytest.fixture(scope="function")
def db_engine(test_config):
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with every table created
    """
    engine = create_db_engine(test_config)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in the app."""

    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def log_repo(session_factory) -> SQLModelHabitLogRepository:
    return SQLModelHabitLogRepository(session_factory)


@pytest.fixture
def settings_repo(session_factory) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session_factory)


@pytest.fixture
def scheduler() -> InMemoryNotificationScheduler:
    return InMemoryNotificationScheduler()


@pytest.fixture
def habit_service(habit_repo, log_repo, scheduler) -> HabitService:
    return HabitService(habit_repo, log_repo, scheduler)


@pytest.fixture
def habit_factory(habit_repo, habit_builder):
    """Persist habits built with ``habit_builder`` defaults."""

    def _create(**kwargs) -> Habit:
        return habit_repo.create(habit_builder(**kwargs))

    return _create


@pytest.fixture
def app_context(test_config):
    """Fully wired application context backed by a temp-dir database."""

    return create_app_context(test_config)
