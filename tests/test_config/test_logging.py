"""Testes para config.logging.

Cobre: configure_logging, ContextFilter, create_json_formatter,
mask_phone, log_fallback e log_transition.
"""

from __future__ import annotations

import json
import logging

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    ContextFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_fallback,
    log_transition,
    mask_phone,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _record(msg: str = "event", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("app.sessions.controller", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    @pytest.mark.parametrize("level", sorted(VALID_LOG_LEVELS))
    def test_accepts_valid_levels(self, level: str) -> None:
        configure_logging(level=level.lower())

        assert logging.getLogger().level == getattr(logging, level)

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_replaces_handlers_and_installs_context_filter(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]

        configure_logging()

        assert len(root.handlers) == 1
        assert any(isinstance(f, ContextFilter) for f in root.handlers[0].filters)

    def test_get_logger_returns_named_logger(self) -> None:
        assert get_logger("app.sessions").name == "app.sessions"


class TestContextFilter:
    def test_injects_context_from_getters(self) -> None:
        ctx_filter = ContextFilter("svc", lambda: "corr-1", lambda: "tenant-9")
        record = _record()

        assert ctx_filter.filter(record) is True
        assert record.correlation_id == "corr-1"
        assert record.tenant_id == "tenant-9"
        assert record.service == "svc"

    def test_extra_takes_precedence(self) -> None:
        ctx_filter = ContextFilter("svc", lambda: "corr-1", lambda: "tenant-9")
        record = _record(tenant_id="tenant-explicit")

        ctx_filter.filter(record)

        assert record.tenant_id == "tenant-explicit"
        assert record.correlation_id == "corr-1"

    def test_defaults_to_empty_strings(self) -> None:
        record = _record()

        ContextFilter(DEFAULT_SERVICE_NAME).filter(record)

        assert record.correlation_id == ""
        assert record.tenant_id == ""
        assert record.service == "whatsapp-session-bridge"


class TestJsonFormatter:
    def test_output_has_required_fields_renamed(self) -> None:
        record = _record("session_state_changed", to_state="IDLE")
        ContextFilter("svc", lambda: "corr-1", lambda: "tenant-1").filter(record)

        payload = json.loads(create_json_formatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.sessions.controller"
        assert payload["message"] == "session_state_changed"
        assert payload["tenant_id"] == "tenant-1"
        assert payload["to_state"] == "IDLE"
        assert "levelname" not in payload

    def test_field_constants(self) -> None:
        assert "correlation_id" in REQUIRED_LOG_FIELDS
        assert "tenant_id" in REQUIRED_LOG_FIELDS
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}


class TestHelpers:
    @pytest.mark.parametrize(
        ("phone", "expected"),
        [
            ("+91 98765-43210", "***3210"),
            ("1234", "***"),
            ("", "***"),
            (None, "***"),
        ],
    )
    def test_mask_phone(self, phone: str | None, expected: str) -> None:
        assert mask_phone(phone) == expected

    def test_log_fallback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("test.fallback")

        with caplog.at_level(logging.INFO, logger="test.fallback"):
            log_fallback(logger, "message_dispatch", reason="session_not_authenticated", elapsed_ms=1.5)

        record = caplog.records[-1]
        assert record.fallback_used is True
        assert record.component == "message_dispatch"
        assert record.reason == "session_not_authenticated"
        assert record.elapsed_ms == 1.5

    def test_log_fallback_omits_optional_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("test.fallback")

        with caplog.at_level(logging.INFO, logger="test.fallback"):
            log_fallback(logger, "message_dispatch")

        record = caplog.records[-1]
        assert not hasattr(record, "reason")
        assert not hasattr(record, "elapsed_ms")

    def test_log_transition(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("test.transition")

        with caplog.at_level(logging.INFO, logger="test.transition"):
            log_transition(logger, "tenant-1", "IDLE", "INITIALIZING", trigger="connect")

        record = caplog.records[-1]
        assert record.getMessage() == "session_state_changed"
        assert record.tenant_id == "tenant-1"
        assert record.to_state == "INITIALIZING"
        assert record.trigger == "connect"
        assert record.reason is None
