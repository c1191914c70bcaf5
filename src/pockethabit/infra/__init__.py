"""Infrastructure: database wiring and concrete repositories."""
