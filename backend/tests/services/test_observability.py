"""Structured logging — JSON formatter and idempotent setup."""

import json
import logging

from app.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "app.services.sheet_generator", logging.INFO, __file__, 1,
        "Generation persisted", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_surfaces_extra_fields():
    line = JSONFormatter().format(_record(
        user_id="user-1", state="persisted", persisted_units=3, secret="x",
    ))
    payload = json.loads(line)
    assert payload["message"] == "Generation persisted"
    assert payload["user_id"] == "user-1"
    assert payload["state"] == "persisted"
    assert payload["persisted_units"] == 3
    assert "secret" not in payload


def test_setup_logging_is_idempotent():
    before = len(logging.root.handlers)
    level = logging.root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("INFO", "text")
        added = [h for h in logging.root.handlers if h.get_name() == "revisio"]
        assert len(added) == 1
        assert len(logging.root.handlers) == before + 1
        assert logging.root.level == logging.INFO
    finally:
        for handler in list(logging.root.handlers):
            if handler.get_name() == "revisio":
                logging.root.removeHandler(handler)
        logging.root.setLevel(level)
