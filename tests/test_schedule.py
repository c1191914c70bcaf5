"""Tests for schedules, end conditions and the due-date evaluator."""

from __future__ import annotations

import logging

import pytest

from pockethabit.domain.calendar import day_of_week, iter_dates
from pockethabit.domain.schedule import (
    DailySchedule,
    EndByDate,
    MonthlySchedule,
    NoEndCondition,
    WeeklySchedule,
    describe_schedule,
    end_condition_from_json,
    end_condition_to_json,
    is_due_on,
    schedule_from_columns,
    schedule_from_dict,
)
from pockethabit.models.habit import Habit


class TestDailySchedule:
    @pytest.mark.parametrize("date_str", ["2024-01-01", "2024-02-29", "1999-12-31", "2030-06-15"])
    def test_due_every_day(self, habit_builder, date_str):
        assert is_due_on(habit_builder(), date_str)

    def test_open_end_condition_never_expires(self, habit_builder):
        habit = habit_builder(end=NoEndCondition())
        assert is_due_on(habit, "2099-12-31")


class TestWeeklySchedule:
    def test_due_exactly_on_configured_weekdays(self, habit_builder):
        days = {1, 3, 5}
        habit = habit_builder(schedule=WeeklySchedule.of(days))

        for date_str in iter_dates("2024-01-01", "2024-01-28"):
            assert is_due_on(habit, date_str) == (day_of_week(date_str) in days), date_str

    def test_sunday_is_zero(self, habit_builder):
        habit = habit_builder(schedule=WeeklySchedule.of([0]))
        assert is_due_on(habit, "2024-01-07")
        assert not is_due_on(habit, "2024-01-06")

    def test_empty_weekly_schedule_is_never_due(self, habit_builder):
        habit = habit_builder(schedule=WeeklySchedule())
        assert not any(is_due_on(habit, d) for d in iter_dates("2024-01-01", "2024-01-07"))

    def test_out_of_range_weekday_never_matches(self, habit_builder):
        habit = habit_builder(schedule=WeeklySchedule(frozenset({9})))
        assert not any(is_due_on(habit, d) for d in iter_dates("2024-01-01", "2024-01-07"))


class TestMonthlySchedule:
    @pytest.mark.parametrize(
        "date_str, expected",
        [
            ("2024-02-29", True),  # leap-year last day
            ("2024-02-28", False),
            ("2023-02-28", True),
            ("2024-04-30", True),
            ("2024-04-29", False),
            ("2024-01-31", True),
            ("2024-01-30", False),
        ],
    )
    def test_day_31_collapses_onto_last_day(self, habit_builder, date_str, expected):
        habit = habit_builder(schedule=MonthlySchedule.of([31]))
        assert is_due_on(habit, date_str) is expected

    def test_day_30_in_february_and_long_months(self, habit_builder):
        habit = habit_builder(schedule=MonthlySchedule.of([30]))
        assert is_due_on(habit, "2024-02-29")
        assert is_due_on(habit, "2024-01-30")
        assert not is_due_on(habit, "2024-01-31")

    def test_mid_month_day_does_not_collapse(self, habit_builder):
        habit = habit_builder(schedule=MonthlySchedule.of([15]))
        assert is_due_on(habit, "2024-02-15")
        assert not is_due_on(habit, "2024-02-29")

    def test_out_of_range_day_is_ignored(self, habit_builder):
        habit = habit_builder(schedule=MonthlySchedule(frozenset({40})))
        assert not is_due_on(habit, "2024-02-29")
        assert not is_due_on(habit, "2024-01-31")


class TestEndCondition:
    def test_end_date_is_inclusive_and_terminal(self, habit_builder):
        habit = habit_builder(end=EndByDate("2024-01-10"))

        assert is_due_on(habit, "2024-01-09")
        assert is_due_on(habit, "2024-01-10")
        assert not is_due_on(habit, "2024-01-11")
        assert not is_due_on(habit, "2024-06-01")

    def test_expiry_overrides_weekly_match(self, habit_builder):
        habit = habit_builder(schedule=WeeklySchedule.of([1]), end=EndByDate("2024-01-10"))
        assert is_due_on(habit, "2024-01-08")
        assert not is_due_on(habit, "2024-01-15")


class TestMalformedInput:
    @pytest.mark.parametrize("date_str", ["2024-1-5", "", "2024-02-30", "not a date"])
    def test_malformed_date_is_never_due(self, habit_builder, date_str):
        assert not is_due_on(habit_builder(), date_str)

    def test_constructors_clamp_day_values(self):
        assert WeeklySchedule.of([-1, 3, 9, "x"]).days_of_week == frozenset({0, 3, 6})
        assert MonthlySchedule.of([0, 32, "15"]).days_of_month == frozenset({1, 31, 15})

    @pytest.mark.parametrize("raw", [None, "weekly", {"type": "yearly"}, {}])
    def test_unknown_schedule_defaults_to_daily(self, raw):
        assert schedule_from_dict(raw) == DailySchedule()

    def test_non_list_days_become_empty(self):
        assert schedule_from_dict({"type": "weekly", "daysOfWeek": "1,2"}) == WeeklySchedule()

    def test_columns_round_trip(self):
        assert schedule_from_columns("monthly", "[31, 1]") == MonthlySchedule(frozenset({1, 31}))
        assert schedule_from_columns("weekly", "[]") == WeeklySchedule()
        assert schedule_from_columns(None, None) == DailySchedule()

    def test_stored_out_of_range_days_are_dropped(self):
        assert schedule_from_columns("weekly", "[9, 1, -1]") == WeeklySchedule(frozenset({1}))
        assert schedule_from_columns("monthly", "[40, 15, 0]") == MonthlySchedule(frozenset({15}))
        assert schedule_from_dict({"type": "weekly", "daysOfWeek": ["2", True]}) == WeeklySchedule()

    def test_unparseable_days_default_to_daily(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pockethabit.schedule"):
            schedule = schedule_from_columns("weekly", "{{not json")

        assert schedule == DailySchedule()
        assert "defaulting to daily" in caplog.text

    def test_corrupt_habit_row_behaves_like_daily(self):
        habit = Habit(id="corrupt", name="Stretch", schedule_type="monthly", schedule_days="oops")
        assert is_due_on(habit, "2024-01-02")

    @pytest.mark.parametrize(
        "raw",
        ["{bad", '{"type": "byDate", "endDate": "2024-02-30"}', '{"type": "byCount"}', "[]"],
    )
    def test_bad_end_condition_is_open_ended(self, raw):
        assert end_condition_from_json(raw) == NoEndCondition()

    def test_end_condition_json(self):
        raw = end_condition_to_json(EndByDate("2024-05-01"))
        assert end_condition_from_json(raw) == EndByDate("2024-05-01")
        assert end_condition_from_json(None) == NoEndCondition()


class TestHabitScheduleColumns:
    def test_set_schedule_writes_columns(self):
        habit = Habit(id="h", name="Swim")
        habit.set_schedule(WeeklySchedule.of([3, 1]))

        assert habit.schedule_type == "weekly"
        assert habit.schedule_days == "[1, 3]"
        assert habit.schedule == WeeklySchedule(frozenset({1, 3}))

    def test_targets_never_below_one(self):
        assert Habit(id="h", name="Swim", target_repeats=0).targets == 1
        assert Habit(id="h", name="Swim", target_repeats=4).targets == 4


def test_describe_schedule():
    labels = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert describe_schedule(DailySchedule()) == "daily"
    assert describe_schedule(WeeklySchedule.of([5, 1]), labels) == "weekly: Mon, Fri"
    assert describe_schedule(MonthlySchedule.of([15, 1])) == "monthly: 1, 15"
    assert describe_schedule(WeeklySchedule()) == "weekly: -"
