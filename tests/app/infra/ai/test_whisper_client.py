"""Testes do WhisperClient com cliente OpenAI mockado."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.infra.ai.whisper_client import WhisperClient
from config.settings import OpenAISettings


def _client(create: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.audio.transcriptions.create = create
    return client


def _whisper(create: AsyncMock) -> WhisperClient:
    settings = OpenAISettings(api_key="sk-test", transcription_enabled=True)
    return WhisperClient(settings=settings, client=_client(create))


@pytest.mark.asyncio
async def test_transcribe_returns_text_language_and_duration() -> None:
    create = AsyncMock(
        return_value=SimpleNamespace(
            model_dump=lambda: {"text": "  bom dia  ", "language": "portuguese", "duration": 2}
        )
    )

    result = await _whisper(create).transcribe(
        audio_bytes=b"OggS", mime_type="audio/ogg; codecs=opus"
    )

    assert result.text == "bom dia"
    assert result.language == "portuguese"
    assert result.duration_seconds == 2.0
    assert result.error is None
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "whisper-1"
    assert kwargs["file"].name == "audio.ogg"


@pytest.mark.asyncio
async def test_unknown_mime_defaults_to_ogg_name() -> None:
    create = AsyncMock(return_value={"text": "ok"})

    await _whisper(create).transcribe(audio_bytes=b"x", mime_type="audio/mpeg")
    assert create.call_args.kwargs["file"].name == "audio.mp3"

    await _whisper(create).transcribe(audio_bytes=b"x", mime_type="audio/x-desconhecido")
    assert create.call_args.kwargs["file"].name == "audio.ogg"


@pytest.mark.asyncio
async def test_empty_audio_is_not_sent() -> None:
    create = AsyncMock()

    result = await _whisper(create).transcribe(audio_bytes=b"")

    assert result.error == "empty_audio"
    create.assert_not_awaited()


@pytest.mark.asyncio
async def test_api_failure_returns_error_result() -> None:
    create = AsyncMock(side_effect=RuntimeError("rate limited"))

    result = await _whisper(create).transcribe(audio_bytes=b"x", mime_type="audio/ogg")

    assert result.text == ""
    assert result.error == "whisper_failed"
