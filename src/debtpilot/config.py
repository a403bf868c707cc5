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


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    """Read an integer setting, rejecting garbage and values below ``minimum``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    """Read a float setting, rejecting garbage and values below ``minimum``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments.

    Class attributes hold the defaults so pure functions can use them without
    instantiating a config (and touching the filesystem).
    """

    APP_NAME = "DebtPilot"
    DB_FILENAME = "debtpilot.db"

    MAX_HORIZON_MONTHS = 360
    DUPLICATE_WINDOW_DAYS = 90
    DUPLICATE_DATE_TOLERANCE_DAYS = 1
    DUPLICATE_AMOUNT_TOLERANCE = 0.01
    DUPLICATE_SIMILARITY_THRESHOLD = 0.8
    FETCH_RETRY_ATTEMPTS = 0
    INSIGHT_EXTRA_PAYMENT = 200.0

    LOG_MAX_BYTES = 10 * 1024 * 1024
    LOG_BACKUP_COUNT = 5

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool("DEBTPILOT_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("DEBTPILOT_DATABASE_URL", self._build_sqlite_url())
        self.MAX_HORIZON_MONTHS = _env_int(
            "DEBTPILOT_MAX_HORIZON_MONTHS", type(self).MAX_HORIZON_MONTHS, minimum=1
        )
        self.DUPLICATE_WINDOW_DAYS = _env_int(
            "DEBTPILOT_DUPLICATE_WINDOW_DAYS", type(self).DUPLICATE_WINDOW_DAYS
        )
        self.DUPLICATE_DATE_TOLERANCE_DAYS = _env_int(
            "DEBTPILOT_DUPLICATE_DATE_TOLERANCE_DAYS", type(self).DUPLICATE_DATE_TOLERANCE_DAYS
        )
        self.DUPLICATE_AMOUNT_TOLERANCE = _env_float(
            "DEBTPILOT_DUPLICATE_AMOUNT_TOLERANCE", type(self).DUPLICATE_AMOUNT_TOLERANCE
        )
        self.DUPLICATE_SIMILARITY_THRESHOLD = _env_float(
            "DEBTPILOT_DUPLICATE_SIMILARITY_THRESHOLD", type(self).DUPLICATE_SIMILARITY_THRESHOLD
        )
        self.FETCH_RETRY_ATTEMPTS = _env_int(
            "DEBTPILOT_FETCH_RETRY_ATTEMPTS", type(self).FETCH_RETRY_ATTEMPTS
        )
        self.LOG_MAX_BYTES = _env_int("DEBTPILOT_LOG_MAX_BYTES", type(self).LOG_MAX_BYTES, minimum=1)
        self.LOG_BACKUP_COUNT = _env_int("DEBTPILOT_LOG_BACKUP_COUNT", type(self).LOG_BACKUP_COUNT)
        if self.DUPLICATE_SIMILARITY_THRESHOLD > 1.0:
            raise ValueError("DEBTPILOT_DUPLICATE_SIMILARITY_THRESHOLD must be <= 1.0")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("DEBTPILOT_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration for the test-suite: in-memory database, no dev console noise."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = False
        self.DATABASE_URL = "sqlite://"
