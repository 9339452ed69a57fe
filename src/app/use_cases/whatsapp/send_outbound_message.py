"""Use case de envio: executa pedidos consumidos da fila de saída.

Um pedido por vez por slot de prefetch. Sucesso → ack. Falha → nack
sem requeue por padrão: o produtor é dono da política de retry.
Pedido inválido é sempre descartado.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, assert_never

from pydantic import ValidationError

from app.domain.send_request import (
    PresenceSendRequest,
    ReactionSendRequest,
    ReadSendRequest,
    SendRequest,
    TextSendRequest,
    parse_send_request,
)
from app.observability import correlation_scope, record_latency, record_outbound_outcome
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.protocols.chat_session import SessionProviderProtocol
    from app.protocols.queue import QueueDelivery

logger = logging.getLogger(__name__)


class OutboundSender:
    """Traduz pedidos de envio em comandos da sessão viva."""

    def __init__(
        self,
        *,
        sessions: SessionProviderProtocol,
        requeue_on_failure: bool = False,
    ) -> None:
        self._sessions = sessions
        self._requeue_on_failure = requeue_on_failure

    async def handle(self, delivery: QueueDelivery) -> None:
        """Processa uma entrega e a confirma (ack) ou rejeita (nack)."""
        with correlation_scope(f"queue:{delivery.delivery_id}"):
            try:
                request = parse_send_request(delivery.payload)
            except ValidationError as exc:
                logger.warning(
                    "outbound_request_invalid",
                    extra={"error_count": exc.error_count()},
                )
                await delivery.nack(requeue=False)
                record_outbound_outcome("invalid", "dropped")
                return

            started_at = time.perf_counter()
            try:
                await self.send(request)
            except Exception as exc:
                requeue = self._requeue_on_failure
                logger.error(
                    "outbound_send_failed",
                    extra={
                        "action": request.action,
                        "error_type": type(exc).__name__,
                        "requeue": requeue,
                    },
                )
                await delivery.nack(requeue=requeue)
                if not requeue:
                    log_fallback(logger, "outbound_sender", reason=type(exc).__name__)
                record_outbound_outcome(request.action, "requeued" if requeue else "dropped")
                return

            await delivery.ack()
            elapsed_ms = (time.perf_counter() - started_at) * 1000
            record_latency("outbound_sender", request.action, elapsed_ms)
            record_outbound_outcome(request.action, "acked")
            logger.info("outbound_request_sent", extra={"action": request.action})

    async def send(self, request: SendRequest) -> None:
        """Executa o pedido na sessão (aguarda LIVE se necessário)."""
        session = await self._sessions.get_session()
        match request:
            case TextSendRequest():
                await session.send_text(request.chat_id, request.text)
            case PresenceSendRequest():
                await session.set_presence(request.chat_id, request.presence)
            case ReadSendRequest():
                await session.mark_read(request.keys)
            case ReactionSendRequest():
                await session.send_reaction(request.chat_id, request.key, request.emoji)
            case _:
                assert_never(request)
