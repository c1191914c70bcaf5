"""Tests for the observable settings service."""

from __future__ import annotations

from pockethabit.services.settings import (
    ONBOARDING_KEY,
    REMINDER_SETTINGS_KEY,
    ReminderSettings,
    SettingsService,
)


class TestReminderSettings:
    def test_defaults(self, settings_repo):
        service = SettingsService(settings_repo)
        assert service.reminder_settings() == ReminderSettings(enabled=False, hour=21, minute=0)

    def test_round_trip(self, settings_repo):
        service = SettingsService(settings_repo)
        service.set_reminder_settings(ReminderSettings(enabled=True, hour=7, minute=30))

        fresh = SettingsService(settings_repo)
        assert fresh.reminder_settings() == ReminderSettings(enabled=True, hour=7, minute=30)

    def test_malformed_value_heals_to_defaults(self, settings_repo):
        settings_repo.set(REMINDER_SETTINGS_KEY, '{"enabled": true, "hour": 99, "minute": 0}')
        assert SettingsService(settings_repo).reminder_settings() == ReminderSettings()

        settings_repo.set(REMINDER_SETTINGS_KEY, "not json")
        assert SettingsService(settings_repo).reminder_settings() == ReminderSettings()


class TestOnboarding:
    def test_flag(self, settings_repo):
        service = SettingsService(settings_repo)
        assert not service.has_seen_onboarding()

        service.set_has_seen_onboarding(True)

        assert service.has_seen_onboarding()
        assert settings_repo.get(ONBOARDING_KEY).value == "1"
        assert service.as_dict() == {
            "reminders": {"enabled": False, "hour": 21, "minute": 0},
            "has_seen_onboarding": True,
        }


class TestSubscriptions:
    def test_listeners_see_changes_until_unsubscribed(self, settings_repo):
        service = SettingsService(settings_repo)
        seen = []
        unsubscribe = service.subscribe(lambda key, value: seen.append((key, value)))

        service.set("theme", "dark")
        service.delete("theme")
        unsubscribe()
        service.set("theme", "light")

        assert seen == [("theme", "dark"), ("theme", None)]

    def test_failing_listener_does_not_block_others(self, settings_repo):
        service = SettingsService(settings_repo)
        seen = []

        def broken(key, value):
            raise RuntimeError("boom")

        service.subscribe(broken)
        service.subscribe(lambda key, value: seen.append(key))

        service.set("theme", "dark")

        assert seen == ["theme"]
        assert service.get("theme") == "dark"

    def test_values_are_cached(self, settings_repo):
        service = SettingsService(settings_repo)
        service.set("theme", "dark")

        settings_repo.set("theme", "changed elsewhere")

        assert service.get("theme") == "dark"
        assert service.get("missing", "fallback") == "fallback"
