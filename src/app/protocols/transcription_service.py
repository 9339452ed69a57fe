"""Protocolo para transcrição de áudio recebido."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class TranscriptionResult:
    """Resultado da transcrição de áudio."""

    text: str
    language: str | None = None
    duration_seconds: float | None = None
    error: str | None = None


class TranscriptionServiceProtocol(Protocol):
    """Contrato para transcrição de áudio."""

    async def transcribe(
        self,
        *,
        audio_bytes: bytes,
        mime_type: str | None = None,
    ) -> TranscriptionResult:
        """Transcreve o áudio. Falhas retornam `error` em vez de levantar."""
        ...
