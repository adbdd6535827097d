"""Logging setup shared by the CLI and the terminal UI.

Everything lockdesk sends to the server ends up in an audit trail:
``lockdesk.log`` holds one JSON object per line, carrying the action, the
resources it targeted and the HTTP status that came back. The console gets
Rich output while the CLI runs; the TUI owns the terminal, so it only writes
the file.

Environment:

``LOCKDESK_LOG_DIR``
    where ``lockdesk.log`` is written when no directory is configured.
``LOCKDESK_RICH=0``
    print JSON lines on the console instead of Rich output.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Keys lifted from ``extra=`` into the JSON line; anything else stays out of the trail.
CONTEXT_KEYS = ("resource", "resources", "action", "request_id", "capability", "path", "status")

LOG_FILE_NAME = "lockdesk.log"
DEFAULT_LOG_DIR = Path.home() / ".lockdesk" / "logs"

# httpx reports every request at INFO; the client logs what matters itself.
_CHATTY_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, UTC timestamp first."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="seconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({key: record.__dict__[key] for key in CONTEXT_KEYS if key in record.__dict__})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _audit_file(log_dir: Path) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "filename": str(log_dir / LOG_FILE_NAME),
        "maxBytes": 2 * 1024 * 1024,
        "backupCount": 3,
        "encoding": "utf-8",
    }


def _console(rich: bool) -> Dict[str, Any]:
    if not rich:
        return {"class": "logging.StreamHandler", "formatter": "json"}
    return {
        "class": "rich.logging.RichHandler",
        "formatter": "plain",
        "rich_tracebacks": True,
        "show_path": False,
        "markup": False,
    }


def configure_logging(
    *, level: str = "INFO", log_dir: Optional[Path] = None, console: bool = True
) -> None:
    """Route lockdesk's logging to the audit file and, optionally, the console.

    ``log_dir`` wins over ``$LOCKDESK_LOG_DIR``. Pass ``console=False`` when a
    full-screen UI is running. Calling it again replaces the previous setup.
    """

    directory = Path(log_dir or os.environ.get("LOCKDESK_LOG_DIR", DEFAULT_LOG_DIR))
    directory.mkdir(parents=True, exist_ok=True)

    handlers = {"audit": _audit_file(directory)}
    if console:
        handlers["console"] = _console(os.environ.get("LOCKDESK_RICH", "1") != "0")

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter},
                "plain": {"format": "%(message)s", "datefmt": "%H:%M:%S"},
            },
            "handlers": handlers,
            "loggers": {name: {"level": "WARNING"} for name in _CHATTY_LOGGERS},
            "root": {"level": level.upper(), "handlers": list(handlers)},
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["CONTEXT_KEYS", "JsonFormatter", "configure_logging", "get_logger"]
