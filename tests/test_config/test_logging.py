"""Testes para config.logging e app.observability.

Cobre: configure_logging, log_fallback, CorrelationIdFilter,
create_json_formatter, correlation_scope e métricas via log.
"""

from __future__ import annotations

import asyncio
import json
import logging
from unittest.mock import MagicMock

import pytest

from app.observability import (
    correlation_scope,
    get_correlation_id,
    record_dispatch_outcome,
    record_reconnect_scheduled,
)
from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_fallback,
)
from config.logging.config import DEFAULT_SERVICE_NAME, NOISY_LOGGERS


def _record(msg: str = "message") -> logging.LogRecord:
    return logging.LogRecord(
        name="app.sessions.connection_manager",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_level_is_case_insensitive(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_replaces_existing_handlers(self) -> None:
        """Reconfigurar nunca duplica handlers."""
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]

        configure_logging()

        assert len(root.handlers) == 1
        assert any(isinstance(f, CorrelationIdFilter) for f in root.handlers[0].filters)

    def test_noisy_loggers_are_quieted_outside_debug(self) -> None:
        configure_logging(level="INFO")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_default_service_name(self) -> None:
        assert DEFAULT_SERVICE_NAME == "ponte_whatsapp"

    def test_get_logger_returns_named_logger(self) -> None:
        assert get_logger("app.use_cases") is logging.getLogger("app.use_cases")


class TestLogFallback:
    """Testes para log_fallback."""

    def test_basic_fallback(self) -> None:
        logger = MagicMock(spec=logging.Logger)

        log_fallback(logger, "inbound_dispatch")

        logger.info.assert_called_once()
        assert logger.info.call_args[0][0] == "fallback_applied"
        extra = logger.info.call_args[1]["extra"]
        assert extra == {"fallback_used": True, "component": "inbound_dispatch"}

    def test_fallback_with_reason_and_elapsed(self) -> None:
        logger = MagicMock(spec=logging.Logger)

        log_fallback(logger, "outbound_sender", reason="ConnectionError", elapsed_ms=12.345)

        extra = logger.info.call_args[1]["extra"]
        assert extra["reason"] == "ConnectionError"
        assert extra["elapsed_ms"] == 12.35


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_injects_correlation_id_and_service(self) -> None:
        record = _record()

        assert CorrelationIdFilter("svc", lambda: "wa:ABC").filter(record) is True
        assert record.correlation_id == "wa:ABC"
        assert record.service == "svc"

    def test_explicit_correlation_id_wins(self) -> None:
        record = _record()
        record.correlation_id = "explicit"

        CorrelationIdFilter("svc", lambda: "from-getter").filter(record)

        assert record.correlation_id == "explicit"

    def test_empty_without_getter(self) -> None:
        record = _record()

        CorrelationIdFilter("svc").filter(record)

        assert record.correlation_id == ""


class TestJsonFormatter:
    def test_constants(self) -> None:
        assert set(REQUIRED_LOG_FIELDS) == {
            "asctime",
            "levelname",
            "name",
            "message",
            "correlation_id",
            "service",
        }
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_formats_record_with_renamed_fields_and_extras(self) -> None:
        record = _record("connection_live")
        record.correlation_id = "queue:1-0"
        record.service = "ponte_whatsapp"
        record.attempt = 2

        output = json.loads(create_json_formatter().format(record))

        assert output["message"] == "connection_live"
        assert output["level"] == "INFO"
        assert output["logger"] == "app.sessions.connection_manager"
        assert output["correlation_id"] == "queue:1-0"
        assert output["attempt"] == 2


class TestCorrelationScope:
    def test_scope_sets_and_restores(self) -> None:
        assert get_correlation_id() == ""
        with correlation_scope("wa:MSG1") as correlation_id:
            assert correlation_id == "wa:MSG1"
            with correlation_scope("queue:9"):
                assert get_correlation_id() == "queue:9"
            assert get_correlation_id() == "wa:MSG1"
        assert get_correlation_id() == ""

    def test_scope_generates_id_when_missing(self) -> None:
        with correlation_scope() as correlation_id:
            assert len(correlation_id) == 36

    @pytest.mark.asyncio
    async def test_scope_is_isolated_per_task(self) -> None:
        seen: dict[str, str] = {}

        async def work(name: str) -> None:
            with correlation_scope(name):
                await asyncio.sleep(0)
                seen[name] = get_correlation_id()

        await asyncio.gather(work("wa:A"), work("wa:B"))

        assert seen == {"wa:A": "wa:A", "wa:B": "wa:B"}


class TestMetrics:
    def test_metrics_are_emitted_as_logs(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="app.observability.metrics"):
            record_dispatch_outcome("text", "published")
            record_reconnect_scheduled(2, 4.0, "connection_closed")

        dispatch, reconnect = caplog.records
        assert dispatch.getMessage() == "metric_dispatch_outcome"
        assert (dispatch.kind, dispatch.outcome) == ("text", "published")
        assert reconnect.delay_seconds == 4.0
        assert reconnect.attempt == 2
