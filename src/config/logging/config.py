"""Configuração centralizada de logging.

Um único handler JSON no logger raiz, com filtro de contexto que injeta
service e correlation_id. Bibliotecas de rede ruidosas ficam em WARNING.

Uso:
    from config.logging import configure_logging, get_logger

    # app/bootstrap/
    configure_logging(level="INFO", service_name="ponte_whatsapp")

    logger = get_logger(__name__)
    logger.info("connection_live", extra={"attempts": 0})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "ponte_whatsapp"

# Clientes HTTP/gRPC das dependências de infraestrutura
NOISY_LOGGERS = (
    "google",
    "urllib3",
    "httpx",
    "httpcore",
    "openai",
)


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o processo.

    Deve ser chamada uma vez, no bootstrap.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço injetado em cada record.
        correlation_id_getter: Função que devolve o correlation_id do
            contexto atual (ContextVar em app/observability).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substitui handlers existentes (reconfiguração em testes/reload)
    root.handlers = [handler]

    if level_upper != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo (geralmente __name__)."""
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Registra que um caminho fail-open foi usado.

    Ex.: pedido de desculpas enviado no lugar do processamento, transcrição
    ignorada, requisição outbound descartada sem requeue.

    Args:
        logger: Logger do chamador.
        component: Componente que aplicou o fallback (ex: "inbound_dispatch").
        reason: Motivo curto, sem PII (ex: "unsupported_message").
        elapsed_ms: Tempo decorrido até o fallback, quando aplicável.
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
    }
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = round(elapsed_ms, 2)

    logger.info("fallback_applied", extra=extra)
