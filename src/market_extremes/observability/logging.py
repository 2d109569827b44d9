"""Logging setup for the ``market-extremes`` CLI and for host processes.

Reports are written to stdout as JSON, so every handler configured here
writes to stderr or to a file. Host applications that embed the service
can skip :func:`configure_logging` and attach their own handlers to the
``market_extremes`` logger instead.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# ``extra=`` keys copied onto JSON lines when a record carries them.
CONTEXT_FIELDS = ("symbol", "universe", "batch")

# httpx logs one INFO line per request; a universe fetch is dozens of them.
NOISY_LOGGERS = ("httpx", "httpcore")

ROTATE_MAX_BYTES = 10 * 1024 * 1024
ROTATE_BACKUPS = 5


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, with fetch context fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(
    level: str = "INFO",
    *,
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Install root handlers: stderr console plus an optional rotating file.

    ``level`` applies to the root logger. The HTTP client loggers are held at
    WARNING unless ``level`` is DEBUG.
    """
    formatter = "json" if json_format else "text"
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": formatter,
            "stream": "ext://sys.stderr",
        }
    }
    if log_file:
        file_path = Path(log_file).expanduser().resolve()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(file_path),
            "maxBytes": ROTATE_MAX_BYTES,
            "backupCount": ROTATE_BACKUPS,
            "formatter": formatter,
            "encoding": "utf-8",
        }

    client_level = "DEBUG" if level.upper() == "DEBUG" else "WARNING"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonLogFormatter},
                "text": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S%z",
                },
            },
            "handlers": handlers,
            "loggers": {name: {"level": client_level} for name in NOISY_LOGGERS},
            "root": {"level": level.upper(), "handlers": list(handlers)},
        }
    )
