"""Pipeline de extração de mídia.

Para variantes de mídia: obtém a sessão viva, baixa o binário pela
sessão, grava no object storage sob o caminho derivado e devolve uma
nova mensagem com `storage_key` preenchido. Qualquer falha vira
MediaUnavailableError; não há retry interno.

Áudios podem ser transcritos (opcional); falha de transcrição mantém
`content` vazio e não interrompe o processamento.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from app.domain.canonical_message import AudioMessage
from app.observability import record_latency
from config.logging import log_fallback
from utils.errors import MediaUnavailableError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.domain.canonical_message import MediaMessage
    from app.protocols.chat_session import SessionProviderProtocol
    from app.protocols.object_storage import ObjectStorageProtocol
    from app.protocols.transcription_service import TranscriptionServiceProtocol

logger = logging.getLogger(__name__)


class MediaExtractionPipeline:
    """Baixa, arquiva e anexa a chave da mídia à mensagem canônica."""

    def __init__(
        self,
        *,
        sessions: SessionProviderProtocol,
        storage: ObjectStorageProtocol,
        bucket: str,
        transcriber: TranscriptionServiceProtocol | None = None,
    ) -> None:
        self._sessions = sessions
        self._storage = storage
        self._bucket = bucket
        self._transcriber = transcriber
        self._bucket_ready = False

    async def extract(
        self,
        message: MediaMessage,
        payload: Mapping[str, Any],
    ) -> MediaMessage:
        """Executa o pipeline para uma mensagem de mídia.

        Args:
            message: Variante de mídia produzida pelo classificador.
            payload: Payload bruto de origem (necessário para o download).

        Returns:
            Nova instância com `storage_key` (e transcrição, se áudio).

        Raises:
            MediaUnavailableError: Sessão, download ou upload falharam.
        """
        started_at = time.perf_counter()
        try:
            session = await self._sessions.get_session()
            data = await session.download_media(payload)
            record_latency("media_pipeline", "download", (time.perf_counter() - started_at) * 1000)

            if not self._bucket_ready:
                await self._storage.ensure_bucket(self._bucket)
                self._bucket_ready = True

            storage_key = await self._storage.put(
                self._bucket,
                message.storage_path,
                data,
                message.mime_type,
            )
        except Exception as exc:
            logger.warning(
                "media_extraction_failed",
                extra={
                    "kind": message.kind,
                    "message_id": message.message_id,
                    "error_type": type(exc).__name__,
                },
            )
            raise MediaUnavailableError(
                f"Mídia indisponível para {message.kind} {message.message_id}"
            ) from exc

        logger.info(
            "media_stored",
            extra={
                "kind": message.kind,
                "message_id": message.message_id,
                "mime_type": message.mime_type,
                "size_bytes": len(data),
            },
        )
        record_latency("media_pipeline", "extract", (time.perf_counter() - started_at) * 1000)

        updates: dict[str, Any] = {"storage_key": storage_key}
        if isinstance(message, AudioMessage) and self._transcriber is not None:
            updates["content"] = await self._transcribe(message, data)
        return message.model_copy(update=updates)

    async def _transcribe(self, message: AudioMessage, data: bytes) -> str:
        try:
            result = await self._transcriber.transcribe(  # type: ignore[union-attr]
                audio_bytes=data,
                mime_type=message.mime_type,
            )
        except Exception as exc:
            log_fallback(logger, "audio_transcription", reason=type(exc).__name__)
            return ""
        if result.error:
            log_fallback(logger, "audio_transcription", reason=result.error)
            return ""
        return result.text
