from __future__ import annotations

import io
import json
import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(ROOT))

from backend.logging_config import JsonLineFormatter, configure_logging


def _record(message: str, level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="guidescope.api",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_known_extra_fields():
    line = JsonLineFormatter().format(
        _record("prompt.generated", preset_id="medical-device", query_count=10, unrelated="x")
    )

    payload = json.loads(line)
    assert payload["severity"] == "INFO"
    assert payload["message"] == "prompt.generated"
    assert payload["logger"] == "guidescope.api"
    assert payload["preset_id"] == "medical-device"
    assert payload["query_count"] == 10
    assert "unrelated" not in payload
    assert "timestamp" in payload


def test_formatter_keeps_japanese_text():
    line = JsonLineFormatter().format(_record("設定を保存しました"))

    assert "設定を保存しました" in line


def test_formatter_includes_stack_trace_for_errors():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record("settings.save_failed", level=logging.ERROR)
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["severity"] == "ERROR"
    assert "ValueError: boom" in payload["stack_trace"]


def test_configure_logging_replaces_root_handlers():
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    stream = io.StringIO()
    try:
        configure_logging()
        configure_logging(logging.DEBUG, stream=stream)

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonLineFormatter)
        assert root.level == logging.DEBUG

        logging.getLogger("guidescope.api").debug("settings.reset", extra={"source": "defaults"})

        payload = json.loads(stream.getvalue().splitlines()[-1])
        assert payload["message"] == "settings.reset"
        assert payload["source"] == "defaults"
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
