"""Métricas via structured logging.

Registradas como logs `metric_*` e agregadas fora do processo
(ex.: Cloud Logging → BigQuery).

Métricas:
- Latência por componente/operação
- Resultado do despacho de cada mensagem recebida
- Reconexões agendadas (escada de backoff)
- Resultado de cada pedido de envio consumido
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
) -> None:
    """Registra latência de operação.

    Args:
        component: Ex: "media_pipeline", "outbound_sender"
        operation: Ex: "download", "upload", "send_text"
        latency_ms: Latência em milissegundos
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
        },
    )


def record_dispatch_outcome(kind: str, outcome: str) -> None:
    """Registra o desfecho de uma mensagem recebida.

    Args:
        kind: Variante canônica ("text", "image", ..., "unknown") ou "unclassified"
        outcome: "published", "apology_sent", "server_error_sent", "failed", "skipped"
    """
    logger.info(
        "metric_dispatch_outcome",
        extra={
            "metric_type": "counter",
            "component": "inbound_dispatch",
            "kind": kind,
            "outcome": outcome,
        },
    )


def record_reconnect_scheduled(attempt: int, delay_seconds: float, trigger: str) -> None:
    """Registra reconexão agendada pelo ciclo de vida."""
    logger.info(
        "metric_reconnect_scheduled",
        extra={
            "metric_type": "counter",
            "component": "connection_lifecycle",
            "attempt": attempt,
            "delay_seconds": delay_seconds,
            "trigger": trigger,
        },
    )


def record_outbound_outcome(action: str, outcome: str) -> None:
    """Registra desfecho de um pedido de envio (acked, dropped, requeued)."""
    logger.info(
        "metric_outbound_outcome",
        extra={
            "metric_type": "counter",
            "component": "outbound_sender",
            "action": action,
            "outcome": outcome,
        },
    )
