"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

PAY_DAY_MIN = 1
PAY_DAY_MAX = 31


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_pay_day(name: str, default: int = PAY_DAY_MIN) -> int:
    """Read a pay day from the environment, clamped to 1..31."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        day = int(value)
    except ValueError:
        return default
    return max(PAY_DAY_MIN, min(PAY_DAY_MAX, day))


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "carryover"
    DB_FILENAME = "carryover.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("CARRYOVER_DEV_MODE", default=True)
        self.LOG_LEVEL = os.getenv("CARRYOVER_LOG_LEVEL", "INFO").upper()
        self.PAY_DAY = _env_pay_day("CARRYOVER_PAY_DAY")
        self.DATABASE_URL = os.getenv("CARRYOVER_DATABASE_URL", self._build_sqlite_url())

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("CARRYOVER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """In-memory database, used by the test-suite and throwaway CLI runs."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True
        self.DATABASE_URL = "sqlite://"
