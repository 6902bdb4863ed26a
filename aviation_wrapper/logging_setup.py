"""Structured JSON logging for the API process."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in ("icao", "request_path", "status_code", "attempt", "breaker_state"):
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


_handler: logging.Handler | None = None


def setup_logging(level: str | int = logging.INFO) -> None:
    """Install one JSON stream handler on the root logger; later calls only adjust the level."""
    global _handler
    root = logging.getLogger()
    root.setLevel(level)

    # Called once per app instance, and tests build several apps.
    if _handler is not None and _handler in root.handlers:
        return

    _handler = logging.StreamHandler()
    _handler.setFormatter(JsonFormatter())
    root.addHandler(_handler)
