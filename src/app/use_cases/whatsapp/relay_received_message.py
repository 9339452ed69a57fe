"""Relay de eco (WA_ECHO_RECEIVED).

Modo de diagnóstico: consome as mensagens canônicas publicadas na fila
de recebidas e as devolve como pedido de texto ao próprio remetente.
Mensagens sem texto (mídia sem legenda, desconhecidas) são confirmadas
e ignoradas.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from app.domain.canonical_message import from_event
from app.observability import correlation_scope
from app.use_cases.whatsapp.dispatch_inbound_batch import message_content

if TYPE_CHECKING:
    from app.protocols.queue import QueueDelivery, QueuePublisherProtocol

logger = logging.getLogger(__name__)


class EchoRelay:
    """Republica mensagens recebidas na routing key de envio."""

    def __init__(self, *, publisher: QueuePublisherProtocol, send_routing_key: str) -> None:
        self._publisher = publisher
        self._send_routing_key = send_routing_key

    async def handle(self, delivery: QueueDelivery) -> None:
        with correlation_scope(f"queue:{delivery.delivery_id}"):
            try:
                message = from_event(delivery.payload)
            except ValidationError:
                logger.warning("echo_payload_invalid")
                await delivery.nack(requeue=False)
                return

            text = message_content(message)
            if not text or message.contact.is_me:
                await delivery.ack()
                return

            try:
                await self._publisher.publish(
                    self._send_routing_key,
                    {"action": "text", "chatId": message.chat_id, "text": text},
                )
            except Exception as exc:
                logger.error("echo_publish_failed", extra={"error_type": type(exc).__name__})
                await delivery.nack(requeue=False)
                return
            await delivery.ack()
            logger.info("echo_relayed", extra={"kind": message.kind})
