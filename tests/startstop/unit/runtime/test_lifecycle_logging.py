from __future__ import annotations

import json
import logging

from startstop.api.logging import LoggingConfig
from startstop.runtime.config import LifecycleConfig
from startstop.runtime.logging import JsonFormatter, configure_logging, setup_logging, shutdown_logging


def test_setup_logging_applies_config_when_handlers_missing() -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        root.handlers.clear()
        root.setLevel(logging.NOTSET)
        assert setup_logging(LoggingConfig(level_name="DEBUG")) is True
        assert root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_setup_logging_does_not_override_existing_handlers() -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    sentinel = logging.NullHandler()
    try:
        root.handlers.clear()
        root.addHandler(sentinel)
        root.setLevel(logging.WARNING)
        assert setup_logging(LoggingConfig(level_name="DEBUG")) is False
        assert root.handlers == [sentinel]
        assert root.level == logging.WARNING
    finally:
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_lifecycle_config_streams_json_to_file(tmp_path) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    log_path = tmp_path / "logs" / "lifecycle.jsonl"
    cfg = LifecycleConfig(log_level="INFO", log_file=str(log_path))
    try:
        configure_logging(cfg.logging_config())
        logging.getLogger("startstop.runtime").info("failed_to_start error=%s", "boom")
        shutdown_logging()
    finally:
        shutdown_logging()
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)

    payload = json.loads(log_path.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert payload["level"] == "INFO"
    assert payload["logger"] == "startstop.runtime"
    assert payload["msg"] == "failed_to_start error=boom"
    assert payload["thread"] == "MainThread"


def test_text_file_format_is_honoured(tmp_path) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    log_path = tmp_path / "lifecycle.log"
    cfg = LifecycleConfig(log_file=str(log_path), log_file_format="text")
    try:
        configure_logging(cfg.logging_config())
        logging.getLogger("startstop.runtime").warning("signal_handlers_skipped thread=%s", "worker")
        shutdown_logging()
    finally:
        shutdown_logging()
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)

    line = log_path.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert "WARNING startstop.runtime [MainThread]: signal_handlers_skipped thread=worker" in line


def test_json_formatter_preserves_extra_fields() -> None:
    record = logging.LogRecord("startstop.runtime", logging.ERROR, __file__, 1, "error stopping db", (), None)
    record.node = "db"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["fields"] == {"node": "db"}
    assert payload["msg"] == "error stopping db"
