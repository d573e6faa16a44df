"""Testes para config.logging.

Cobre: configure_logging, get_logger, log_dropped,
LogContextFilter, create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from app.observability import instance_scope, reset_correlation_id, set_correlation_id
from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    LogContextFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_dropped,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _record(msg: str = "message", **attrs: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_configure_logging_default_level(self) -> None:
        """Configura logging com nível padrão INFO."""
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_is_case_insensitive(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_invalid_level_raises(self) -> None:
        """Nível inválido levanta ValueError."""
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        """configure_logging substitui handlers existentes."""
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1
        assert any(isinstance(f, LogContextFilter) for f in root.handlers[0].filters)

    def test_uvicorn_loggers_propagate_to_root(self) -> None:
        logging.getLogger("uvicorn.error").handlers = [logging.NullHandler()]
        configure_logging()
        uvicorn_logger = logging.getLogger("uvicorn.error")
        assert uvicorn_logger.handlers == []
        assert uvicorn_logger.propagate is True

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "zap_engine"


class TestGetLogger:
    def test_get_logger_returns_named_logger(self) -> None:
        logger = get_logger("test.module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test.module"
        assert get_logger("test.module") is logger


class TestLogDropped:
    """Testes para log_dropped."""

    def test_log_dropped_basic(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_dropped(logger, "webhook_dispatcher", "queue_full")

        call_args = logger.warning.call_args
        assert call_args[0][0] == "Event dropped by %s"
        assert call_args[0][1] == "webhook_dispatcher"
        extra = call_args[1]["extra"]
        assert extra == {"dropped": True, "component": "webhook_dispatcher", "reason": "queue_full"}

    def test_log_dropped_with_instance_and_event(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_dropped(logger, "webhook_dispatcher", "sealed", instance_id="111", event="qr")

        extra = logger.warning.call_args[1]["extra"]
        assert extra["instance_id"] == "111"
        assert extra["event"] == "qr"


class TestLogContextFilter:
    """Testes para LogContextFilter."""

    def test_filter_adds_context_from_getters(self) -> None:
        filter_ = LogContextFilter("svc", lambda: "corr-123", lambda: "111")
        record = _record()

        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.instance_id == "111"
        assert record.service == "svc"

    def test_filter_preserves_explicit_values(self) -> None:
        filter_ = LogContextFilter("svc", lambda: "from-getter", lambda: "from-getter")
        record = _record(correlation_id="explicit", instance_id="222")

        filter_.filter(record)

        assert record.correlation_id == "explicit"
        assert record.instance_id == "222"

    def test_filter_without_getters_uses_empty_strings(self) -> None:
        filter_ = LogContextFilter("svc")
        record = _record()

        filter_.filter(record)

        assert record.correlation_id == ""
        assert record.instance_id == ""

    def test_filter_reads_context_vars(self) -> None:
        from app.observability import get_correlation_id, get_instance_id

        filter_ = LogContextFilter("svc", get_correlation_id, get_instance_id)
        token = set_correlation_id("req-1")
        try:
            with instance_scope("333"):
                record = _record()
                filter_.filter(record)
        finally:
            reset_correlation_id(token)

        assert record.correlation_id == "req-1"
        assert record.instance_id == "333"


class TestCreateJsonFormatter:
    def test_required_fields(self) -> None:
        assert set(REQUIRED_LOG_FIELDS) == {
            "asctime",
            "levelname",
            "name",
            "message",
            "service",
            "correlation_id",
            "instance_id",
        }
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_formatter_outputs_renamed_json(self) -> None:
        from pythonjsonlogger.json import JsonFormatter

        formatter = create_json_formatter()
        assert isinstance(formatter, JsonFormatter)

        record = _record(
            "instance_connected",
            correlation_id="abc-123",
            instance_id="111",
            service="zap_engine",
        )
        payload = json.loads(formatter.format(record))

        assert payload["message"] == "instance_connected"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "test"
        assert payload["instance_id"] == "111"
        assert payload["correlation_id"] == "abc-123"
