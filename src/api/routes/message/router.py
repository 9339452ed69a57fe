"""Endpoints HTTP de publicação direta na fila.

Atalhos para produtores sem acesso ao broker e para testes manuais:
o corpo é publicado como está na routing key correspondente.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request, status

from config.settings import get_queue_settings
from utils.errors import InfrastructureError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/send-message", status_code=status.HTTP_202_ACCEPTED)
async def send_message(
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, str]:
    """Enfileira um pedido de envio (routing key de envio)."""
    routing_key = get_queue_settings().send_routing_key
    await _publish(request, routing_key, payload)
    return {"status": "queued", "routing_key": routing_key}


@router.post("/received-message", status_code=status.HTTP_202_ACCEPTED)
async def received_message(
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, str]:
    """Publica uma mensagem na routing key de recebidas."""
    routing_key = get_queue_settings().received_routing_key
    await _publish(request, routing_key, payload)
    return {"status": "queued", "routing_key": routing_key}


async def _publish(request: Request, routing_key: str, payload: dict[str, Any]) -> None:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="not_ready")
    try:
        await gateway.publisher.publish(routing_key, payload)
    except InfrastructureError as exc:
        logger.error(
            "http_publish_failed",
            extra={"routing_key": routing_key, "error_type": type(exc).__name__},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="queue_unavailable",
        ) from exc
    logger.info("http_message_published", extra={"routing_key": routing_key})
