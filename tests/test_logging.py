"""Tests for the structured logger factory."""

from __future__ import annotations

import json
import logging

from utils.logging import _ConsoleFormatter, _StructuredFormatter, get_logger


def test_adapter_merges_bound_and_call_site_extra(caplog) -> None:
    log = get_logger("tests.logging", {"batch_id": "b-1"})

    with caplog.at_level(logging.INFO, logger="tests.logging"):
        log.info("batch_started", extra={"size": 3})

    [record] = [r for r in caplog.records if r.name == "tests.logging"]
    assert record.getMessage() == "batch_started"
    assert record.batch_id == "b-1"
    assert record.size == 3


def test_structured_formatter_emits_json_with_extras() -> None:
    record = logging.makeLogRecord(
        {"name": "core.x", "levelname": "INFO", "msg": "search_completed", "top_k": 5, "hits": 2}
    )

    payload = json.loads(_StructuredFormatter().format(record))

    assert payload["message"] == "search_completed"
    assert payload["logger"] == "core.x"
    assert payload["top_k"] == 5
    assert payload["hits"] == 2


def test_console_formatter_appends_key_values() -> None:
    record = logging.makeLogRecord({"name": "core.x", "levelname": "INFO", "msg": "image_deleted", "image_id": "abc"})

    line = _ConsoleFormatter("%(levelname)s %(message)s").format(record)

    assert line == "INFO image_deleted | image_id='abc'"
