"""Structured logging configuration with JSON output and rotation."""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path

from .config import BaseConfig

ROOT_LOGGER_NAME = "debtpilot"


# Attributes every LogRecord carries, plus the ones formatters stamp on it
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
}

# Extra keys that identify whose data a line is about; lifted to the top level
CONTEXT_FIELDS = ("user_id", "debt_name", "file_name")


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    ``user_id``, ``debt_name`` and ``file_name`` passed through ``extra=`` sit
    next to ``message`` so log lines can be grepped per user, debt or
    statement. Any other extra keys (``window_size``, ``residual``, ...) go
    under ``"extra"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        supplied = {
            key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS
        }
        for key in CONTEXT_FIELDS:
            if key in supplied:
                log_data[key] = supplied.pop(key)
        if supplied:
            log_data["extra"] = supplied

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


_CONSOLE_FORMATS = {
    True: ("[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s", "%H:%M:%S"),
    False: ("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S"),
}


def _console_handler(dev_mode: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO if dev_mode else logging.WARNING)
    fmt, datefmt = _CONSOLE_FORMATS[dev_mode]
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    return handler


def _file_handler(config: BaseConfig) -> logging.Handler:
    logs_dir = Path(config.DATA_DIR) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=logs_dir / "debtpilot.log",
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(config: BaseConfig) -> logging.Logger:
    """Attach console and rotating JSON file handlers to the package logger.

    Safe to call more than once; previous handlers are closed and replaced.

    Args:
        config: Application configuration with DATA_DIR, DEV_MODE and the
            LOG_* rotation settings

    Returns:
        The ``debtpilot`` logger
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(logging.INFO)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    file_handler = _file_handler(config)
    package_logger.addHandler(_console_handler(config.DEV_MODE))
    package_logger.addHandler(file_handler)

    package_logger.info(
        "Logging initialized",
        extra={
            "dev_mode": config.DEV_MODE,
            "log_file": file_handler.baseFilename,
            "data_dir": config.DATA_DIR,
        },
    )
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under ``debtpilot``.

    Module names already inside the package (``debtpilot.services.x``) are
    used as-is.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
