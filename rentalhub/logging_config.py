# rentalhub/logging_config.py
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .config import settings
from .middleware.request_id import get_request_id

# ids the workflows attach through `extra=`; only the ones present are emitted
DOMAIN_FIELDS: tuple[str, ...] = ("user_id", "room_id", "booking_id", "contract_id", "invoice_id")

# third-party loggers and the level they are held at (None = follow ours)
QUIET_LOGGERS: dict[str, Optional[str]] = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "uvicorn.access": None,
}

HANDLER_NAME = "rentalhub"


def domain_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: getattr(record, k) for k in DOMAIN_FIELDS if getattr(record, k, None) is not None}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, request_id, ids, exc_info."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        rid = get_request_id()
        if rid:
            payload["request_id"] = rid
        payload.update(domain_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """`12:00:01 INFO  rentalhub.x [rid] message booking_id=b1` for a terminal."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S")
        parts = [ts, f"{record.levelname:<5}", record.name]
        rid = get_request_id()
        if rid:
            parts.append(f"[{rid}]")
        parts.append(record.getMessage())
        parts.extend(f"{k}={v}" for k, v in domain_fields(record).items())
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


FORMATTERS: dict[str, type[logging.Formatter]] = {"json": JsonFormatter, "text": TextFormatter}


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Handler:
    """
    Install one stderr handler on the root logger. Calling again replaces the
    handler installed earlier and leaves any other root handlers in place.
    """
    level = (level or os.getenv("LOG_LEVEL") or settings.log_level or "INFO").upper()
    fmt = (fmt or settings.log_format or "json").lower()
    if fmt not in FORMATTERS:
        raise ValueError(f"unknown log format {fmt!r}; expected one of {sorted(FORMATTERS)}")

    root = logging.getLogger()
    root.setLevel(level)
    for h in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(FORMATTERS[fmt]())
    root.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level or level)
    return handler
