"""Testes do pipeline de extração de mídia."""

from __future__ import annotations

import pytest

from app.infra.stores.memory_stores import MemoryObjectStorage
from app.protocols.transcription_service import TranscriptionResult
from app.services.media_extraction import MediaExtractionPipeline
from app.services.message_classifier import classify
from tests.fakes.fake_whatsapp import FakeSession, FakeSessionProvider, make_payload
from utils.errors import MediaUnavailableError, SessionFatalError

JID = "5511999999999@s.whatsapp.net"


class FakeTranscriber:
    def __init__(self, result: TranscriptionResult | None = None, error: Exception | None = None):
        self.result = result or TranscriptionResult(text="olá")
        self.error = error
        self.calls: list[tuple[bytes, str | None]] = []

    async def transcribe(self, *, audio_bytes: bytes, mime_type: str | None = None):
        self.calls.append((audio_bytes, mime_type))
        if self.error is not None:
            raise self.error
        return self.result


class FailingStorage(MemoryObjectStorage):
    async def put(self, bucket: str, key: str, data: bytes, mime_type: str) -> str:
        raise RuntimeError("bucket indisponível")


def _pipeline(
    provider: FakeSessionProvider,
    storage: MemoryObjectStorage | None = None,
    transcriber: FakeTranscriber | None = None,
) -> tuple[MediaExtractionPipeline, MemoryObjectStorage]:
    storage = storage or MemoryObjectStorage()
    pipeline = MediaExtractionPipeline(
        sessions=provider,
        storage=storage,
        bucket="whatsapp-media",
        transcriber=transcriber,
    )
    return pipeline, storage


@pytest.mark.asyncio
async def test_image_is_downloaded_and_stored_under_derived_path() -> None:
    provider = FakeSessionProvider(FakeSession(media=b"\x89PNG"))
    pipeline, storage = _pipeline(provider)
    payload = make_payload({"imageMessage": {"mimetype": "image/jpeg"}})
    message = classify(payload)

    result = await pipeline.extract(message, payload)

    path = f"/image/MSG1-{JID}.jpg"
    assert result.storage_key == path
    assert message.storage_key is None
    assert storage.buckets["whatsapp-media"][path] == (b"\x89PNG", "image/jpeg")
    assert provider.session.downloads == [payload]


@pytest.mark.asyncio
async def test_download_failure_raises_media_unavailable() -> None:
    session = FakeSession()
    session.download_error = ConnectionError("expired")
    pipeline, storage = _pipeline(FakeSessionProvider(session))
    payload = make_payload({"videoMessage": {"mimetype": "video/mp4"}})

    with pytest.raises(MediaUnavailableError):
        await pipeline.extract(classify(payload), payload)

    assert storage.buckets.get("whatsapp-media", {}) == {}


@pytest.mark.asyncio
async def test_upload_failure_raises_media_unavailable() -> None:
    pipeline, _ = _pipeline(FakeSessionProvider(), storage=FailingStorage())
    payload = make_payload({"documentMessage": {"mimetype": "application/pdf"}})

    with pytest.raises(MediaUnavailableError):
        await pipeline.extract(classify(payload), payload)


@pytest.mark.asyncio
async def test_fatal_session_raises_media_unavailable() -> None:
    provider = FakeSessionProvider()
    provider.error = SessionFatalError("retries_exhausted")
    pipeline, _ = _pipeline(provider)
    payload = make_payload({"imageMessage": {}})

    with pytest.raises(MediaUnavailableError):
        await pipeline.extract(classify(payload), payload)


@pytest.mark.asyncio
async def test_audio_transcription_fills_content() -> None:
    transcriber = FakeTranscriber(TranscriptionResult(text="quero um orçamento"))
    pipeline, _ = _pipeline(FakeSessionProvider(FakeSession(media=b"ogg")), transcriber=transcriber)
    payload = make_payload({"audioMessage": {"mimetype": "audio/ogg; codecs=opus"}})

    result = await pipeline.extract(classify(payload), payload)

    assert result.content == "quero um orçamento"
    assert result.storage_key == f"/audio/MSG1-{JID}.mp3"
    assert transcriber.calls == [(b"ogg", "audio/ogg; codecs=opus")]


@pytest.mark.asyncio
async def test_transcription_error_keeps_empty_content() -> None:
    transcriber = FakeTranscriber(TranscriptionResult(text="", error="whisper_failed"))
    pipeline, _ = _pipeline(FakeSessionProvider(), transcriber=transcriber)
    payload = make_payload({"audioMessage": {}})

    result = await pipeline.extract(classify(payload), payload)

    assert result.content == ""
    assert result.storage_key is not None


@pytest.mark.asyncio
async def test_transcriber_exception_does_not_fail_extraction() -> None:
    transcriber = FakeTranscriber(error=TimeoutError())
    pipeline, _ = _pipeline(FakeSessionProvider(), transcriber=transcriber)
    payload = make_payload({"audioMessage": {}})

    result = await pipeline.extract(classify(payload), payload)

    assert result.content == ""


@pytest.mark.asyncio
async def test_image_is_not_transcribed() -> None:
    transcriber = FakeTranscriber()
    pipeline, _ = _pipeline(FakeSessionProvider(), transcriber=transcriber)
    payload = make_payload({"imageMessage": {}})

    await pipeline.extract(classify(payload), payload)

    assert transcriber.calls == []
