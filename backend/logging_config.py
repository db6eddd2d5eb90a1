"""JSON line logging for the GuideScope API.

Every record is written to stdout as a single JSON object so collectors can
filter on ``request_id``, ``preset_id`` and friends without parsing text.

Usage::

    from backend.logging_config import configure_logging
    configure_logging()
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

# Attributes the API attaches through ``extra={}``, in output order.
LOG_CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "mode",
    "preset_id",
    "difficulty",
    "query_count",
    "prompt_chars",
    "warning_count",
    "source",
    "storage_path",
    "error",
)


class JsonLineFormatter(logging.Formatter):
    """Render a record as one JSON line with its known context fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in LOG_CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info and record.levelno >= logging.ERROR:
            entry["stack_trace"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> None:
    """Route the root logger through a single JSON line handler.

    Handlers installed earlier are dropped, so repeated calls do not duplicate
    output.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonLineFormatter())
    root.addHandler(handler)
    root.setLevel(level)
