"""Loop de despacho de mensagens recebidas.

Para cada lote entregue pela sessão (ordem de chegada preservada):
1. Descarta status@broadcast (configurável)
2. Marca o lote inteiro como lido (best-effort)
3. Para cada item, isolado dos demais:
   contato (find-or-create) → classificação → mídia (se houver)
   → persistência → publicação na fila → marca o item como lido
4. Payload malformado ou tipo não suportado: envia o pedido de
   desculpas fixo ao remetente e segue para o próximo item.
   Mídia indisponível: envia o aviso fixo de problema nos servidores.
   Qualquer outra falha é logada e também não interrompe o lote.

Lotes são processados um de cada vez; itens de um lote, em sequência.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, assert_never

from app.constants.whatsapp import STATUS_BROADCAST_JID
from app.constants.whatsapp_fixed_replies import SERVER_ERROR_REPLY, UNSUPPORTED_MESSAGE_REPLY
from app.domain.canonical_message import (
    AudioMessage,
    DocumentMessage,
    ImageMessage,
    LocationMessage,
    TextMessage,
    UnknownMessage,
    VideoMessage,
    to_event,
)
from app.domain.contact import ContactRecord
from app.observability import correlation_scope, record_dispatch_outcome, record_latency
from app.services.message_classifier import build_contact_info, classify
from config.logging import log_fallback
from utils.errors import (
    DownstreamPublishError,
    MalformedPayloadError,
    MediaUnavailableError,
    UnsupportedMessageError,
)

if TYPE_CHECKING:
    from app.domain.canonical_message import CanonicalMessage
    from app.protocols.chat_session import SessionProviderProtocol
    from app.protocols.queue import QueuePublisherProtocol
    from app.protocols.record_store import RecordStoreProtocol
    from app.services.media_extraction import MediaExtractionPipeline

logger = logging.getLogger(__name__)


class InboundDispatchLoop:
    """Processa lotes de mensagens recebidas e publica as canônicas."""

    def __init__(
        self,
        *,
        sessions: SessionProviderProtocol,
        record_store: RecordStoreProtocol,
        publisher: QueuePublisherProtocol,
        media_pipeline: MediaExtractionPipeline,
        routing_key: str,
        skip_status_broadcast: bool = True,
    ) -> None:
        self._sessions = sessions
        self._record_store = record_store
        self._publisher = publisher
        self._media = media_pipeline
        self._routing_key = routing_key
        self._skip_status_broadcast = skip_status_broadcast
        self._batch_lock = asyncio.Lock()

    async def dispatch(self, batch: Sequence[Mapping[str, Any]]) -> None:
        """Processa um lote. Nunca levanta por falha de item individual."""
        items = [item for item in batch if self._should_process(item)]
        if not items:
            return

        async with self._batch_lock:
            started_at = time.perf_counter()
            await self._mark_read([item["key"] for item in items])
            for item in items:
                await self._process_item(item)
            record_latency(
                "inbound_dispatch",
                "batch",
                (time.perf_counter() - started_at) * 1000,
            )
            logger.info("inbound_batch_processed", extra={"batch_size": len(items)})

    def _should_process(self, item: Any) -> bool:
        if not isinstance(item, Mapping) or not isinstance(item.get("key"), Mapping):
            logger.warning("inbound_item_without_key")
            return False
        if self._skip_status_broadcast and item["key"].get("remoteJid") == STATUS_BROADCAST_JID:
            record_dispatch_outcome("unclassified", "skipped")
            return False
        return True

    async def _process_item(self, item: Mapping[str, Any]) -> None:
        key = item["key"]
        with correlation_scope(f"wa:{key.get('id') or 'unknown'}"):
            kind = "unclassified"
            try:
                contact = await self._find_or_create_contact(item)
                message = classify(item)
                kind = message.kind
                message = await self._enrich(message, item)
                await self._record(message, contact)
                await self._publish(message)
                await self._mark_read([key])
            except (MalformedPayloadError, UnsupportedMessageError) as exc:
                logger.warning(
                    "inbound_message_rejected",
                    extra={"kind": kind, "error_type": type(exc).__name__},
                )
                await self._send_fixed_reply(key, UNSUPPORTED_MESSAGE_REPLY)
                log_fallback(logger, "inbound_dispatch", reason=type(exc).__name__)
                record_dispatch_outcome(kind, "apology_sent")
            except MediaUnavailableError as exc:
                logger.warning(
                    "inbound_media_unavailable",
                    extra={"kind": kind, "error_type": type(exc).__name__},
                )
                await self._send_fixed_reply(key, SERVER_ERROR_REPLY)
                log_fallback(logger, "inbound_dispatch", reason=type(exc).__name__)
                record_dispatch_outcome(kind, "server_error_sent")
            except Exception as exc:
                logger.error(
                    "inbound_message_failed",
                    extra={"kind": kind, "error_type": type(exc).__name__},
                )
                record_dispatch_outcome(kind, "failed")
            else:
                logger.info("inbound_message_published", extra={"kind": kind})
                record_dispatch_outcome(kind, "published")

    async def _enrich(
        self,
        message: CanonicalMessage,
        item: Mapping[str, Any],
    ) -> CanonicalMessage:
        match message:
            case ImageMessage() | VideoMessage() | AudioMessage() | DocumentMessage():
                return await self._media.extract(message, item)
            case TextMessage() | LocationMessage():
                return message
            case UnknownMessage():
                raise UnsupportedMessageError(message.source_type)
            case _:
                assert_never(message)

    async def _find_or_create_contact(self, item: Mapping[str, Any]) -> ContactRecord:
        info = build_contact_info(item)
        existing = await self._record_store.find_contact_by_external_id(info.id)
        if existing is not None:
            return existing
        return await self._record_store.create_contact(
            ContactRecord(
                whatsapp_contact_id=info.id,
                whatsapp_contact_name=info.name,
                number=info.number,
                is_group=info.is_group,
                from_me=info.is_me,
            )
        )

    async def _record(self, message: CanonicalMessage, contact: ContactRecord) -> None:
        event = to_event(message)
        await self._record_store.create_message(
            {
                "contact_id": contact.id,
                "whatsapp_message_id": message.message_id,
                "timestamp": message.timestamp,
                "type": message.kind,
                "source_type": message.source_type,
                "content": message_content(message),
                "location": message_location(message),
                "target": event.get("original", {}),
            }
        )

    async def _publish(self, message: CanonicalMessage) -> None:
        try:
            await self._publisher.publish(self._routing_key, to_event(message))
        except Exception as exc:
            msg = f"Falha ao publicar {message.kind} em {self._routing_key}"
            raise DownstreamPublishError(msg) from exc

    async def _mark_read(self, keys: list[Mapping[str, Any]]) -> None:
        try:
            session = await self._sessions.get_session()
            await session.mark_read(keys)
        except Exception as exc:
            logger.warning(
                "mark_read_failed",
                extra={"count": len(keys), "error_type": type(exc).__name__},
            )

    async def _send_fixed_reply(self, key: Mapping[str, Any], text: str) -> None:
        chat_id = key.get("remoteJid")
        if not chat_id:
            logger.warning("fixed_reply_skipped_without_chat")
            return
        try:
            session = await self._sessions.get_session()
            await session.send_text(str(chat_id), text)
        except Exception as exc:
            logger.warning(
                "fixed_reply_send_failed",
                extra={"error_type": type(exc).__name__},
            )


def message_content(message: CanonicalMessage) -> str:
    """Texto associado à variante (corpo, legenda ou transcrição)."""
    match message:
        case TextMessage(content=content) | AudioMessage(content=content):
            return content
        case ImageMessage(caption=caption) | VideoMessage(caption=caption):
            return caption
        case DocumentMessage(caption=caption):
            return caption
        case LocationMessage():
            return message.name or message.address
        case UnknownMessage():
            return ""
        case _:
            assert_never(message)


def message_location(message: CanonicalMessage) -> str | None:
    """Onde o conteúdo está: chave no storage ou coordenadas."""
    match message:
        case ImageMessage() | VideoMessage() | AudioMessage() | DocumentMessage():
            return message.storage_key
        case LocationMessage(latitude=latitude, longitude=longitude):
            return f"{latitude},{longitude}"
        case TextMessage() | UnknownMessage():
            return None
        case _:
            assert_never(message)
