"""Implementações concretas de IO para IA (transcrição de áudio)."""

from app.infra.ai.whisper_client import WhisperClient

__all__ = ["WhisperClient"]
