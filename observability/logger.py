"""Structured event logging for interview session actions.

Every event is one log record carrying a dict payload. The console and the
``*-human.log`` file render it as a short ``key=value`` line; the main log
file receives it as one JSON object per line.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import threading
import time
import uuid
from typing import Any, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FIELDS = ("action", "status", "question_index", "score", "name", "ms", "outcome", "error")

_logger = logging.getLogger("interview")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False
_configure_lock = threading.Lock()


class HumanEventFormatter(logging.Formatter):  # session=... kind=... plus the known fields
    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def formatMessage(self, record: logging.LogRecord) -> str:
        event = getattr(record, "event", None)
        if isinstance(event, dict):
            record.message = format_human(event)
        return super().formatMessage(record)


class JsonEventFormatter(logging.Formatter):  # One JSON object per line
    def format(self, record: logging.LogRecord) -> str:
        event = getattr(record, "event", None)
        if not isinstance(event, dict):
            event = {"ts": record.created, "kind": "log", "message": record.getMessage()}
        return json.dumps(event, ensure_ascii=False, default=str)


def _rotating(path: str, formatter: logging.Formatter, level: str) -> logging.Handler:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _human_path(log_file: str) -> str:
    stem = log_file[:-4] if log_file.endswith(".log") else log_file
    return f"{stem}-human.log"


def configure_logging(
    *,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    file_logs: Optional[bool] = None,
) -> logging.Logger:
    """(Re)build the event handlers; called lazily by ``log_event``."""

    level = (level or LOG_LEVEL).upper()
    log_file = log_file or LOG_FILE
    file_logs = ENABLE_FILE_LOGS if file_logs is None else file_logs
    with _configure_lock:
        for handler in list(_logger.handlers):
            _logger.removeHandler(handler)
            handler.close()
        _logger.setLevel(level)

        console = logging.StreamHandler(stream=sys.stdout)
        console.setLevel(level)
        console.setFormatter(HumanEventFormatter())
        _logger.addHandler(console)

        if file_logs:
            _logger.addHandler(_rotating(log_file, JsonEventFormatter(), level))
            _logger.addHandler(_rotating(_human_path(log_file), HumanEventFormatter(), level))
    return _logger


def format_human(evt: dict[str, Any]) -> str:
    base = f"session={evt.get('session_id')} kind={evt.get('kind')}"
    extras = [f"{key}={evt[key]}" for key in HUMAN_FIELDS if key in evt]
    return base + (" " + " ".join(extras) if extras else "")


def log_event(kind: str, session_id: str, **fields: Any) -> dict[str, Any]:
    """Emit one structured event and return its payload."""

    if not _logger.handlers:
        configure_logging()

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "session_id": session_id,
    }
    payload.update(fields)
    level = logging.ERROR if fields.get("error") and kind.endswith("failed") else logging.INFO
    _logger.log(level, "%s", kind, extra={"event": payload})
    return payload


__all__ = ["HumanEventFormatter", "JsonEventFormatter", "configure_logging", "format_human", "log_event"]
