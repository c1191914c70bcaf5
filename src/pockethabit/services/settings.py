"""Observable settings service.

One instance is created at startup and handed to whoever needs settings.
Values are cached after the first read and subscribers are told about every
change.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional

from ..domain.repositories.settings import SettingsRepository

logger = logging.getLogger("pockethabit.settings")

REMINDER_SETTINGS_KEY = "reminder_settings"
ONBOARDING_KEY = "has_seen_onboarding"

Listener = Callable[[str, Optional[str]], None]


@dataclass(slots=True, frozen=True)
class ReminderSettings:
    """Global daily reminder preference."""

    enabled: bool = False
    hour: int = 21
    minute: int = 0

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "ReminderSettings":
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
        if (
            isinstance(data, dict)
            and isinstance(data.get("enabled"), bool)
            and isinstance(data.get("hour"), int)
            and isinstance(data.get("minute"), int)
            and 0 <= data["hour"] <= 23
            and 0 <= data["minute"] <= 59
        ):
            return cls(enabled=data["enabled"], hour=data["hour"], minute=data["minute"])
        logger.warning("Malformed reminder settings, using defaults", extra={"raw": raw})
        return cls()

    def to_json(self) -> str:
        return json.dumps(asdict(self))


class SettingsService:
    """Cached, observable facade over a settings repository."""

    def __init__(self, repository: SettingsRepository):
        self._repository = repository
        self._cache: dict[str, Optional[str]] = {}
        self._listeners: set[Listener] = set()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if key not in self._cache:
            row = self._repository.get(key)
            self._cache[key] = row.value if row is not None else None
        value = self._cache[key]
        return value if value is not None else default

    def set(self, key: str, value: str, description: str | None = None) -> None:
        self._repository.set(key, value, description)
        self._cache[key] = value
        self._notify(key, value)

    def delete(self, key: str) -> None:
        self._repository.delete(key)
        self._cache[key] = None
        self._notify(key, None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(key, value)``; returns an unsubscribe callable."""

        self._listeners.add(listener)
        return lambda: self._listeners.discard(listener)

    def _notify(self, key: str, value: Optional[str]) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, value)
            except Exception:  # noqa: BLE001
                logger.exception("Settings listener failed", extra={"key": key})

    # Typed accessors

    def reminder_settings(self) -> ReminderSettings:
        return ReminderSettings.from_json(self.get(REMINDER_SETTINGS_KEY))

    def set_reminder_settings(self, settings: ReminderSettings) -> None:
        self.set(REMINDER_SETTINGS_KEY, settings.to_json(), "Daily reminder preference")

    def has_seen_onboarding(self) -> bool:
        return self.get(ONBOARDING_KEY) == "1"

    def set_has_seen_onboarding(self, value: bool) -> None:
        self.set(ONBOARDING_KEY, "1" if value else "0", "Onboarding completed flag")

    def as_dict(self) -> dict[str, Any]:
        return {
            "reminders": asdict(self.reminder_settings()),
            "has_seen_onboarding": self.has_seen_onboarding(),
        }


__all__ = ["ReminderSettings", "SettingsService"]
