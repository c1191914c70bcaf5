"""Smoke tests for the click command-line interface."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from pockethabit.cli import cli
from pockethabit.domain.schedule import WeeklySchedule


@pytest.fixture
def run(app_context):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, list(args), obj=app_context)

    return _run


def _only_habit(app_context):
    habits = app_context.habit_repo.get_all()
    assert len(habits) == 1
    return habits[0]


def test_add_and_list(run, app_context):
    result = run("add", "Stretch", "--weekly", "1,3,5", "--start", "07:00")

    assert result.exit_code == 0, result.output
    habit = _only_habit(app_context)
    assert habit.schedule == WeeklySchedule.of([1, 3, 5])
    assert f"Created {habit.id} Stretch" in result.output

    listing = run("list")
    assert "Stretch" in listing.output
    assert "weekly: Mon, Wed, Fri" in listing.output


def test_weekly_and_monthly_are_exclusive(run):
    result = run("add", "Stretch", "--weekly", "1", "--monthly", "1")

    assert result.exit_code != 0
    assert "mutually exclusive" in result.output


def test_toggle_and_month(run, app_context):
    run("add", "Read")
    habit = _only_habit(app_context)

    toggled = run("toggle", habit.id, "--date", "2024-01-05")
    assert toggled.exit_code == 0, toggled.output
    assert "2024-01-05: done" in toggled.output

    month = run("month", habit.id, "--month", "2024-01")
    assert month.exit_code == 0, month.output
    assert "2024-01-05  done" in month.output
    assert "scheduled 31  done 1  missed 30" in month.output
    assert "streak: current 0  best 1" in month.output


def test_bump_reports_progress(run, app_context):
    run("add", "Water", "--target", "3")
    habit = _only_habit(app_context)

    result = run("bump", habit.id, "--date", "2024-01-05")

    assert result.exit_code == 0, result.output
    assert "2024-01-05: 1/3" in result.output


def test_week_summary(run, app_context):
    run("add", "Read")
    habit = _only_habit(app_context)
    run("toggle", habit.id, "--date", "2024-01-07")

    result = run("week", "--date", "2024-01-07")

    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[0].startswith("Mon 2024-01-01  0/1")
    assert lines[-1] == "Sun 2024-01-07  1/1  100%"


def test_unknown_habit_is_reported(run):
    result = run("toggle", "ghost", "--date", "2024-01-05")

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_invalid_date_is_reported(run, app_context):
    run("add", "Read")
    habit = _only_habit(app_context)

    result = run("toggle", habit.id, "--date", "05/01/2024")

    assert result.exit_code == 1
    assert "YYYY-MM-DD" in result.output


def test_pause_resume_delete(run, app_context):
    run("add", "Walk")
    habit = _only_habit(app_context)

    assert "Paused Walk" in run("pause", habit.id).output
    assert app_context.habit_repo.get_by_id(habit.id).is_paused
    assert "Resumed Walk" in run("resume", habit.id).output

    deleted = run("delete", habit.id, "--yes")
    assert deleted.exit_code == 0, deleted.output
    assert app_context.habit_repo.get_all() == []


def test_streaks_output(run, app_context):
    run("add", "Read")
    habit = _only_habit(app_context)

    result = run("streaks", habit.id)

    assert result.exit_code == 0, result.output
    assert "daily:  current 0  best 0" in result.output
