"""Command-line interface for PocketHabit."""

from __future__ import annotations

from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .domain.calendar import parse_local_date, today_ymd
from .domain.labels import weekday_labels
from .domain.schedule import (
    DailySchedule,
    EndByDate,
    MonthlySchedule,
    NoEndCondition,
    WeeklySchedule,
    describe_schedule,
)
from .errors import PocketHabitError
from .logging_config import setup_logging
from .services.habits import HabitDraft


def _parse_days(raw: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise click.BadParameter(f"expected comma-separated integers, got {raw!r}") from exc


def _app(ctx: click.Context) -> AppContext:
    return ctx.obj


class HabitGroup(click.Group):
    """Reports domain errors as regular CLI errors."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except PocketHabitError as exc:
            raise click.ClickException(str(exc)) from exc


@click.group(cls=HabitGroup)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Track habits, streaks and completion from the terminal."""

    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = create_app_context(config)


@cli.command("add")
@click.argument("name")
@click.option("--weekly", "weekly_days", default=None, help="Weekdays 0-6 (0=Sunday), e.g. 1,3,5")
@click.option("--monthly", "monthly_days", default=None, help="Days of month 1-31, e.g. 1,15,31")
@click.option("--end-date", default=None, help="Last due date, YYYY-MM-DD")
@click.option("--start", "start_time", default="08:00", show_default=True)
@click.option("--end", "end_time", default="09:00", show_default=True)
@click.option("--offset", "reminder_offset", type=int, default=None, help="Reminder minutes before start")
@click.option("--target", type=int, default=1, show_default=True, help="Completions required per day")
@click.option("--icon", default="")
@click.option("--color", default="#4F46E5", show_default=True)
@click.pass_context
def add_habit(
    ctx: click.Context,
    name: str,
    weekly_days: Optional[str],
    monthly_days: Optional[str],
    end_date: Optional[str],
    start_time: str,
    end_time: str,
    reminder_offset: Optional[int],
    target: int,
    icon: str,
    color: str,
) -> None:
    """Create a habit (daily unless --weekly or --monthly is given)."""

    if weekly_days and monthly_days:
        raise click.UsageError("--weekly and --monthly are mutually exclusive")
    if weekly_days is not None:
        schedule = WeeklySchedule.of(_parse_days(weekly_days))
    elif monthly_days is not None:
        schedule = MonthlySchedule.of(_parse_days(monthly_days))
    else:
        schedule = DailySchedule()

    draft = HabitDraft(
        name=name,
        schedule=schedule,
        icon=icon,
        color=color,
        end_condition=EndByDate(end_date) if end_date else NoEndCondition(),
        start_time=start_time,
        end_time=end_time,
        reminder_offset_minutes=reminder_offset,
        target_repeats=target,
    )
    habit = _app(ctx).habits.create_habit(draft)
    click.echo(f"Created {habit.id} {habit.name} ({describe_schedule(habit.schedule)})")


@cli.command("list")
@click.pass_context
def list_habits(ctx: click.Context) -> None:
    """List every habit."""

    app = _app(ctx)
    labels = weekday_labels(app.config.LOCALE)
    for habit in app.habit_repo.get_all():
        paused = " [paused]" if habit.is_paused else ""
        click.echo(
            f"{habit.id}  {habit.start_time}-{habit.end_time}  {habit.name}  "
            f"{describe_schedule(habit.schedule, labels)}{paused}"
        )


@cli.command("today")
@click.option("--date", "date_str", default=None, help="YYYY-MM-DD, defaults to today")
@click.pass_context
def today_cmd(ctx: click.Context, date_str: Optional[str]) -> None:
    """Show habits due on a date."""

    for item in _app(ctx).habits.today_habits(date_str or today_ymd()):
        mark = "x" if item.done else " "
        click.echo(f"[{mark}] {item.habit.name} ({item.habit.id})")


@cli.command("toggle")
@click.argument("habit_id")
@click.option("--date", "date_str", default=None, help="YYYY-MM-DD, defaults to today")
@click.pass_context
def toggle_cmd(ctx: click.Context, habit_id: str, date_str: Optional[str]) -> None:
    """Flip done/undone for a date."""

    log = _app(ctx).habits.toggle_habit_for_date(habit_id, date_str or today_ymd())
    click.echo(f"{log.date}: {'done' if log.done else 'not done'}")


@cli.command("bump")
@click.argument("habit_id")
@click.option("--date", "date_str", default=None, help="YYYY-MM-DD, defaults to today")
@click.pass_context
def bump_cmd(ctx: click.Context, habit_id: str, date_str: Optional[str]) -> None:
    """Record one more completion for a multi-repeat habit."""

    app = _app(ctx)
    habit = app.habits.require_habit(habit_id)
    log = app.habits.increment_habit_progress(habit_id, date_str or today_ymd())
    click.echo(f"{log.date}: {log.progress}/{habit.targets}{' done' if log.done else ''}")


@cli.command("streaks")
@click.argument("habit_id")
@click.pass_context
def streaks_cmd(ctx: click.Context, habit_id: str) -> None:
    """Show current and best streaks of a habit."""

    streaks = _app(ctx).habits.get_habit_streaks(habit_id)
    click.echo(f"daily:  current {streaks.current_daily}  best {streaks.best_daily}")
    click.echo(f"weekly: current {streaks.current_weekly}  best {streaks.best_weekly}")


@cli.command("week")
@click.option("--date", "date_str", default=None, help="Last day of the 7-day window")
@click.pass_context
def week_cmd(ctx: click.Context, date_str: Optional[str]) -> None:
    """Completion summary of the last 7 days."""

    for day in _app(ctx).habits.weekly_summary(date_str):
        click.echo(
            f"{day.label} {day.date}  {day.total_done}/{day.total_planned}  "
            f"{day.completion_rate:.0%}"
        )


@cli.command("month")
@click.argument("habit_id")
@click.option("--month", "month_str", default=None, help="YYYY-MM, defaults to the current month")
@click.pass_context
def month_cmd(ctx: click.Context, habit_id: str, month_str: Optional[str]) -> None:
    """Monthly calendar of one habit."""

    reference = parse_local_date(f"{month_str}-01" if month_str else today_ymd())
    if reference is None:
        raise click.BadParameter(f"expected YYYY-MM, got {month_str!r}")
    stats = _app(ctx).habits.monthly_stats(habit_id, reference.year, reference.month)
    for day in stats.days:
        click.echo(f"{day.date}  {day.state.value}")
    click.echo(
        f"scheduled {stats.scheduled_days}  done {stats.done_days}  "
        f"missed {stats.missed_days}  rate {stats.completion_rate:.0%}"
    )
    click.echo(f"streak: current {stats.current_monthly_streak}  best {stats.best_monthly_streak}")


@cli.command("history")
@click.option("--before", default=None, help="Load the page ending the day before this date")
@click.option("--months", type=int, default=None, help="Months per page")
@click.pass_context
def history_cmd(ctx: click.Context, before: Optional[str], months: Optional[int]) -> None:
    """Paginated completion history, newest first."""

    page = _app(ctx).habits.history_page(before=before, months=months)
    for month in page.months:
        click.echo(month.label)
        for week in month.weeks:
            cells = " ".join(f"{d.label}:{d.total_done}/{d.total_planned}" for d in week.days)
            click.echo(f"  {week.week_start}  {cells}")
    if page.has_more:
        click.echo(f"more: --before {page.next_before}")


@cli.command("pause")
@click.argument("habit_id")
@click.pass_context
def pause_cmd(ctx: click.Context, habit_id: str) -> None:
    """Pause a habit."""

    habit = _app(ctx).habits.set_habit_paused(habit_id, True)
    click.echo(f"Paused {habit.name} since {habit.paused_at}")


@cli.command("resume")
@click.argument("habit_id")
@click.pass_context
def resume_cmd(ctx: click.Context, habit_id: str) -> None:
    """Resume a paused habit."""

    habit = _app(ctx).habits.set_habit_paused(habit_id, False)
    if habit.is_paused:
        click.echo(f"{habit.name} has ended and stays paused")
    else:
        click.echo(f"Resumed {habit.name}")


@cli.command("delete")
@click.argument("habit_id")
@click.confirmation_option(prompt="Delete this habit and all of its history?")
@click.pass_context
def delete_cmd(ctx: click.Context, habit_id: str) -> None:
    """Delete a habit and its logs."""

    _app(ctx).habits.delete_habit(habit_id)
    click.echo(f"Deleted {habit_id}")


@cli.command("expire")
@click.pass_context
def expire_cmd(ctx: click.Context) -> None:
    """Pause habits whose end date has passed."""

    count = _app(ctx).habits.auto_disable_expired_habits()
    click.echo(f"Disabled {count} expired habit(s)")


def main() -> None:
    cli()
