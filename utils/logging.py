# Path: utils/logging.py
# Purpose: Shared logging configuration and logger factory.
# Layer: utils.
# Details: Console output renders extra fields as key=value pairs; a rotating file handler writes JSON lines.

from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_LOG_ROOT = _PROJECT_ROOT / "log"
_LOG_FILE_NAME = "imgsearch.log"

_STANDARD_KEYS = frozenset(logging.makeLogRecord({}).__dict__.keys()) | {"stack_info", "asctime", "message"}


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _STANDARD_KEYS}


class _StructuredFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(_extras(record))

        try:
            return json.dumps(payload, ensure_ascii=False, sort_keys=True)
        except TypeError:
            safe_payload = {
                key: (value if isinstance(value, (str, int, float, bool, type(None))) else str(value))
                for key, value in payload.items()
            }
            return json.dumps(safe_payload, ensure_ascii=False, sort_keys=True)


class _ConsoleFormatter(logging.Formatter):
    """Human-readable console output with ``extra`` fields appended as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _extras(record)
        if not extras:
            return base
        parts = [f"{key}={value!r}" for key, value in sorted(extras.items())]
        return f"{base} | " + " ".join(parts)


def _log_root() -> Path:
    override = os.environ.get("IMGSEARCH_LOG_DIR")
    return Path(override) if override else _DEFAULT_LOG_ROOT


def configure_logging(level: str = "INFO") -> None:
    """Install console and rotating-file handlers on the root logger once, then apply ``level``."""

    root = logging.getLogger()
    root.setLevel(level.upper())
    if root.handlers:
        return

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_ConsoleFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(console_handler)

    log_root = _log_root()
    try:
        log_root.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_root / _LOG_FILE_NAME,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as exc:
        root.warning("file_logging_unavailable", extra={"log_root": str(log_root), "error": str(exc)})
        return
    file_handler.setFormatter(_StructuredFormatter())
    root.addHandler(file_handler)


class _MergingAdapter(logging.LoggerAdapter):
    """Adapter that merges call-site ``extra`` with the adapter-level mapping."""

    def process(self, msg: Any, kwargs: Any) -> Any:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str, extra: Optional[Dict[str, Any]] = None) -> logging.LoggerAdapter:
    """Return a logger adapter for ``name``.

    The first call configures the root handlers when nothing else has. ``extra``
    is attached to every record emitted through the adapter.
    """

    if not logging.getLogger().handlers:
        configure_logging()
    return _MergingAdapter(logging.getLogger(name), extra or {})


__all__ = ["configure_logging", "get_logger"]
