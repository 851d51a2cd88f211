from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional


EVENT_LOGGER_NAME = "agrihub.events"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_trace_id: ContextVar[str] = ContextVar("agrihub_trace_id", default="unknown")
_events = logging.getLogger(EVENT_LOGGER_NAME)
_configured = False


def _build_handler(log_path: Optional[str]) -> logging.Handler:
    if not log_path:
        return logging.StreamHandler()
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )


def init_logging(*, log_path: Optional[str] = None, level: int = logging.INFO) -> None:
    """Configure root logging once per process: stderr, or a rotating file when `log_path` is set."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[_build_handler(log_path)])
    _events.setLevel(level)
    _configured = True


def set_trace_id(trace_id: str):
    return _trace_id.set(trace_id)


def reset_trace_id(token) -> None:
    _trace_id.reset(token)


def get_trace_id() -> str:
    return _trace_id.get() or "unknown"


def summarize_text(text: str, limit: int = 400) -> str:
    text = str(text or "")
    return text if len(text) <= limit else f"{text[:limit]}..."


def event_line(event: str, **fields: Any) -> str:
    """One JSON object per event; the current trace id is always included."""
    return json.dumps(
        {"event": event, "trace_id": get_trace_id(), **fields},
        ensure_ascii=False,
        default=str,
    )


def log_event(event: str, **fields: Any) -> None:
    _events.info(event_line(event, **fields))


def log_failure(event: str, **fields: Any) -> None:
    _events.warning(event_line(event, **fields))
