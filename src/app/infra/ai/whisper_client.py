"""Cliente Whisper (OpenAI) para transcrição de áudios recebidos."""

from __future__ import annotations

import io
import logging
from typing import Any

from openai import AsyncOpenAI

from app.protocols.transcription_service import TranscriptionResult, TranscriptionServiceProtocol
from config.settings.ai.openai import OpenAISettings, get_openai_settings

logger = logging.getLogger(__name__)

# Notas de voz chegam como audio/ogg; codecs=opus
_MIME_EXT_MAP = {
    "audio/ogg": ".ogg",
    "audio/opus": ".opus",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/mp4": ".m4a",
    "audio/aac": ".aac",
}


class WhisperClient(TranscriptionServiceProtocol):
    """Transcrição via Whisper API."""

    __slots__ = ("_client", "_model")

    def __init__(
        self,
        *,
        settings: OpenAISettings | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        cfg = settings or get_openai_settings()
        self._model = cfg.transcription_model
        self._client = client or AsyncOpenAI(
            api_key=cfg.api_key,
            timeout=cfg.timeout_seconds,
        )

    async def transcribe(
        self,
        *,
        audio_bytes: bytes,
        mime_type: str | None = None,
    ) -> TranscriptionResult:
        if not audio_bytes:
            return TranscriptionResult(text="", error="empty_audio")

        base_mime = (mime_type or "").split(";", 1)[0].strip().lower()
        audio_file = io.BytesIO(audio_bytes)
        audio_file.name = f"audio{_MIME_EXT_MAP.get(base_mime, '.ogg')}"

        try:
            response = await self._client.audio.transcriptions.create(
                model=self._model,
                file=audio_file,
                response_format="verbose_json",
            )
        except Exception as exc:
            logger.warning(
                "whisper_transcription_failed",
                extra={"error_type": type(exc).__name__},
            )
            return TranscriptionResult(text="", error="whisper_failed")

        data = _to_dict(response)
        duration = data.get("duration")
        return TranscriptionResult(
            text=str(data.get("text") or "").strip(),
            language=data.get("language"),
            duration_seconds=float(duration) if isinstance(duration, (int, float)) else None,
        )


def _to_dict(response: Any) -> dict[str, Any]:
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump()
    return {"text": getattr(response, "text", "")}
