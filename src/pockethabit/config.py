"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    """Read a positive integer, ignoring unparseable values."""

    value = os.getenv(name)
    if value is None:
        return default
    try:
        return max(int(value.strip()), minimum)
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "PocketHabit"
    DB_FILENAME = "pockethabit.db"
    SUPPORTED_LOCALES = ("en", "es")

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("POCKETHABIT_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("POCKETHABIT_DATABASE_URL", self._build_sqlite_url())
        self.LOCALE = self._resolve_locale(os.getenv("POCKETHABIT_LOCALE", "en"))
        # Bound for the backward walk of the current daily streak (~5 years).
        self.STREAK_LOOKBACK_DAYS = _env_int("POCKETHABIT_STREAK_LOOKBACK_DAYS", 1830)
        self.HISTORY_PAGE_MONTHS = _env_int("POCKETHABIT_HISTORY_PAGE_MONTHS", 3)
        self.REMINDER_HORIZON_DAYS = _env_int("POCKETHABIT_REMINDER_HORIZON_DAYS", 30)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("POCKETHABIT_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            fallback_path = Path.home() / ".local" / "share" / self.APP_NAME.lower()
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _resolve_locale(self, value: str) -> str:
        locale = (value or "").strip().lower()[:2]
        return locale if locale in self.SUPPORTED_LOCALES else "en"

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for tests: file-backed SQLite inside ``data_dir``."""

    __test__ = False  # keep pytest from collecting this class

    DEBUG = True
    TESTING = True

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self._data_dir_override = Path(data_dir) if data_dir is not None else None
        super().__init__()
        self.DEV_MODE = True
        self.DATABASE_URL = self._build_sqlite_url()
        self.LOCALE = "en"

    def _resolve_data_dir(self) -> Path:
        if self._data_dir_override is None:
            return super()._resolve_data_dir()
        self._data_dir_override.mkdir(parents=True, exist_ok=True)
        return self._data_dir_override.resolve()
