"""Pure domain logic: calendar arithmetic, schedules and store protocols."""
