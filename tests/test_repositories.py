"""Tests for the SQLModel habit, log and settings repositories."""

from __future__ import annotations

import pytest

from pockethabit.domain.schedule import EndByDate, WeeklySchedule
from pockethabit.errors import HabitNotFoundError
from pockethabit.models.habit import Habit


class TestHabitRepository:
    def test_create_and_fetch(self, habit_repo, habit_factory):
        habit = habit_factory(
            habit_id="swim", name="Swim", schedule=WeeklySchedule.of([1, 3]), end=EndByDate("2024-12-31")
        )

        stored = habit_repo.get_by_id("swim")

        assert stored is not None
        assert stored.name == "Swim"
        assert stored.schedule == WeeklySchedule.of([1, 3])
        assert stored.end_condition == EndByDate("2024-12-31")
        assert [h.id for h in habit_repo.get_all()] == [habit.id]

    def test_missing_habit_is_none(self, habit_repo):
        assert habit_repo.get_by_id("missing") is None

    def test_get_all_orders_by_start_time(self, habit_repo, habit_factory):
        habit_factory(habit_id="late", name="Late", start_time="21:00")
        habit_factory(habit_id="early", name="Early", start_time="06:30")

        assert [h.id for h in habit_repo.get_all()] == ["early", "late"]

    def test_update_replaces_fields(self, habit_repo, habit_factory):
        habit = habit_factory(habit_id="h1", name="Old")
        habit.name = "New"
        habit.is_paused = True
        habit.paused_at = "2024-01-05"

        habit_repo.update(habit)
        stored = habit_repo.get_by_id("h1")

        assert stored.name == "New"
        assert stored.is_paused
        assert stored.paused_at == "2024-01-05"

    def test_update_missing_habit_raises(self, habit_repo):
        with pytest.raises(HabitNotFoundError):
            habit_repo.update(Habit(id="ghost", name="Ghost"))

    def test_update_notification_ids(self, habit_repo, habit_factory):
        habit_factory(habit_id="h1")

        habit_repo.update_notification_ids("h1", ["a", "b"])

        assert habit_repo.get_by_id("h1").notification_ids == ["a", "b"]

    def test_delete_cascades_to_logs(self, habit_repo, log_repo, habit_factory):
        habit_factory(habit_id="h1")
        habit_factory(habit_id="h2")
        log_repo.toggle("h1", "2024-01-01")
        log_repo.toggle("h1", "2024-01-02")
        log_repo.toggle("h2", "2024-01-01")

        habit_repo.delete("h1")

        assert habit_repo.get_by_id("h1") is None
        assert log_repo.get_logs_for_habit("h1") == []
        assert [log.habit_id for log in log_repo.get_logs_for_date("2024-01-01")] == ["h2"]

    def test_delete_missing_habit_is_noop(self, habit_repo):
        habit_repo.delete("missing")


class TestToggle:
    def test_toggle_creates_done_log(self, log_repo, habit_factory):
        habit_factory(habit_id="h1")

        log = log_repo.toggle("h1", "2024-01-01")

        assert log.id == "h1:2024-01-01"
        assert log.done
        assert log.progress == 1
        assert log.completed_at is not None

    def test_toggle_flips_back_and_forth(self, log_repo, habit_factory):
        habit_factory(habit_id="h1")

        log_repo.toggle("h1", "2024-01-01")
        undone = log_repo.toggle("h1", "2024-01-01")

        assert not undone.done
        assert undone.progress == 0
        assert undone.completed_at is None

        redone = log_repo.toggle("h1", "2024-01-01")
        assert redone.done
        assert len(log_repo.get_logs_for_habit("h1")) == 1

    def test_toggle_fills_target(self, log_repo, habit_factory):
        habit_factory(habit_id="h1", target_repeats=3)

        log = log_repo.toggle("h1", "2024-01-01", target_repeats=3)

        assert log.done
        assert log.progress == 3


class TestIncrementProgress:
    def test_increments_until_target(self, log_repo, habit_factory):
        habit_factory(habit_id="h1", target_repeats=3)

        progress = [log_repo.increment_progress("h1", "2024-01-01", 3) for _ in range(4)]

        assert [(log.progress, log.done) for log in progress] == [
            (1, False),
            (2, False),
            (3, True),
            (3, True),
        ]
        assert progress[2].completed_at is not None

    def test_single_repeat_is_done_immediately(self, log_repo, habit_factory):
        habit_factory(habit_id="h1")

        log = log_repo.increment_progress("h1", "2024-01-01", 1)

        assert log.done
        assert log.progress == 1


class TestUpsertAndQueries:
    def test_upsert_overwrites_single_row(self, log_repo, habit_factory):
        habit_factory(habit_id="h1", target_repeats=3)

        log_repo.upsert_log("h1", "2024-01-01", True, target_repeats=3)
        log = log_repo.upsert_log("h1", "2024-01-01", False, progress=2, target_repeats=3)

        assert not log.done
        assert log.progress == 2
        assert log.completed_at is None
        assert len(log_repo.get_logs_for_habit("h1")) == 1

    def test_upsert_done_fills_target(self, log_repo, habit_factory):
        habit_factory(habit_id="h1", target_repeats=3)

        log = log_repo.upsert_log("h1", "2024-01-01", True, target_repeats=3)

        assert log.done
        assert log.progress == 3
        assert log.completed_at is not None

    def test_upsert_not_done_stays_below_target(self, log_repo, habit_factory):
        habit_factory(habit_id="h1", target_repeats=3)

        log = log_repo.upsert_log("h1", "2024-01-01", False, progress=5, target_repeats=3)

        assert not log.done
        assert log.progress == 2
        assert log.completed_at is None

    def test_range_queries(self, log_repo, habit_factory):
        habit_factory(habit_id="h1")
        habit_factory(habit_id="h2")
        for date in ["2024-01-03", "2024-01-01", "2024-01-05"]:
            log_repo.upsert_log("h1", date, True)
        log_repo.upsert_log("h2", "2024-01-02", True)

        assert [log.date for log in log_repo.get_logs_for_habit("h1")] == [
            "2024-01-01",
            "2024-01-03",
            "2024-01-05",
        ]
        assert [log.date for log in log_repo.get_logs_for_habit_since("h1", "2024-01-02")] == [
            "2024-01-03",
            "2024-01-05",
        ]
        assert [
            (log.habit_id, log.date) for log in log_repo.get_logs_between("2024-01-02", "2024-01-03")
        ] == [("h2", "2024-01-02"), ("h1", "2024-01-03")]

    def test_earliest_log_date(self, log_repo, habit_factory):
        habit_factory(habit_id="h1")
        assert log_repo.get_earliest_log_date() is None

        log_repo.upsert_log("h1", "2024-02-01", True)
        log_repo.upsert_log("h1", "2023-12-24", False)

        assert log_repo.get_earliest_log_date() == "2023-12-24"


class TestSettingsRepository:
    def test_set_get_delete(self, settings_repo):
        assert settings_repo.get("theme") is None

        settings_repo.set("theme", "dark", "UI theme")
        settings_repo.set("theme", "light")

        assert settings_repo.get("theme").value == "light"

        settings_repo.delete("theme")
        assert settings_repo.get("theme") is None
