"""Logging estruturado JSON da ponte WhatsApp.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="ponte_whatsapp")

    logger = get_logger(__name__)
    logger.info("queue_message_published", extra={"routing_key": "whatsapp.received.message"})

Todo log carrega: correlation_id, service, level, logger, message, asctime.
Nunca registrar texto de mensagens, mídia ou payloads brutos.
"""

from config.logging.config import (
    DEFAULT_SERVICE_NAME,
    configure_logging,
    get_logger,
    log_fallback,
)
from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "DEFAULT_SERVICE_NAME",
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
]
