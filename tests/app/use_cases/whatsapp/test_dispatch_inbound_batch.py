"""Testes do loop de despacho de mensagens recebidas."""

from __future__ import annotations

import pytest

from app.constants.whatsapp_fixed_replies import SERVER_ERROR_REPLY, UNSUPPORTED_MESSAGE_REPLY
from app.domain.canonical_message import LocationMessage, TextMessage
from app.infra.queue.memory_queue import MemoryQueue
from app.infra.stores.memory_stores import MemoryObjectStorage, MemoryRecordStore
from app.services.media_extraction import MediaExtractionPipeline
from app.use_cases.whatsapp import InboundDispatchLoop, message_content, message_location
from tests.fakes.fake_whatsapp import FakeSession, FakeSessionProvider, make_payload

JID = "5511999999999@s.whatsapp.net"
ROUTING_KEY = "whatsapp.received-message"


class FailingQueue(MemoryQueue):
    async def publish(self, routing_key: str, payload: dict) -> None:
        raise ConnectionError("broker offline")


def _build(
    session: FakeSession | None = None,
    queue: MemoryQueue | None = None,
) -> tuple[InboundDispatchLoop, FakeSessionProvider, MemoryRecordStore, MemoryQueue, MemoryObjectStorage]:
    provider = FakeSessionProvider(session)
    records = MemoryRecordStore()
    queue = queue or MemoryQueue()
    storage = MemoryObjectStorage()
    loop = InboundDispatchLoop(
        sessions=provider,
        record_store=records,
        publisher=queue,
        media_pipeline=MediaExtractionPipeline(
            sessions=provider, storage=storage, bucket="whatsapp-media"
        ),
        routing_key=ROUTING_KEY,
    )
    return loop, provider, records, queue, storage


@pytest.mark.asyncio
async def test_unknown_in_middle_of_batch_gets_one_apology_and_others_publish() -> None:
    loop, provider, records, queue, _ = _build()
    batch = [
        make_payload({"conversation": "primeira"}, message_id="A"),
        make_payload({"stickerMessage": {}}, message_id="B"),
        make_payload({"conversation": "terceira"}, message_id="C"),
    ]

    await loop.dispatch(batch)

    published = [payload for key, payload in queue.published if key == ROUTING_KEY]
    assert [payload["messageId"] for payload in published] == ["A", "C"]
    assert [payload["content"] for payload in published] == ["primeira", "terceira"]
    assert provider.session.sent_texts == [(JID, UNSUPPORTED_MESSAGE_REPLY)]
    # Lote inteiro lido primeiro, depois cada item publicado
    assert [k["id"] for k in provider.session.read_batches[0]] == ["A", "B", "C"]
    assert [keys[0]["id"] for keys in provider.session.read_batches[1:]] == ["A", "C"]
    assert len(records.messages) == 2


@pytest.mark.asyncio
async def test_first_message_creates_contact_once() -> None:
    loop, _, records, _, _ = _build()

    await loop.dispatch([make_payload({"conversation": "oi"}, message_id="1")])
    await loop.dispatch([make_payload({"conversation": "de novo"}, message_id="2")])

    assert len(records.contacts) == 1
    contact = next(iter(records.contacts.values()))
    assert contact.whatsapp_contact_id == JID
    assert contact.whatsapp_contact_name == "Maria"
    assert contact.number == "5511999999999"
    assert {fields["contact_id"] for fields in records.messages.values()} == {contact.id}


@pytest.mark.asyncio
async def test_message_record_fields() -> None:
    loop, _, records, _, _ = _build()

    await loop.dispatch(
        [make_payload({"locationMessage": {"degreesLatitude": 1.5, "degreesLongitude": -2.0}})]
    )

    fields = next(iter(records.messages.values()))
    assert fields["whatsapp_message_id"] == "MSG1"
    assert fields["type"] == "location"
    assert fields["source_type"] == "locationMessage"
    assert fields["location"] == "1.5,-2.0"
    assert fields["target"]["key"]["id"] == "MSG1"


@pytest.mark.asyncio
async def test_status_broadcast_is_skipped() -> None:
    loop, provider, records, queue, _ = _build()

    await loop.dispatch([make_payload({"conversation": "story"}, remote_jid="status@broadcast")])

    assert queue.published == []
    assert records.contacts == {}
    assert provider.session.read_batches == []


@pytest.mark.asyncio
async def test_item_without_key_is_ignored() -> None:
    loop, _, _, queue, _ = _build()

    await loop.dispatch([{"message": {"conversation": "sem key"}}])

    assert queue.published == []


@pytest.mark.asyncio
async def test_image_is_archived_before_publish() -> None:
    loop, _, _, queue, storage = _build(FakeSession(media=b"jpeg"))

    await loop.dispatch([make_payload({"imageMessage": {"caption": "olha"}})])

    path = f"/image/MSG1-{JID}.jpg"
    assert storage.buckets["whatsapp-media"][path] == (b"jpeg", "image/jpeg")
    (_, payload), = queue.published
    assert payload["kind"] == "image"
    assert payload["storageKey"] == path
    assert payload["caption"] == "olha"


@pytest.mark.asyncio
async def test_media_failure_skips_item_and_warns_sender_of_server_problem() -> None:
    session = FakeSession()
    session.download_error = ConnectionError("expired")
    loop, provider, records, queue, _ = _build(session)

    await loop.dispatch(
        [
            make_payload({"audioMessage": {}}, message_id="A"),
            make_payload({"conversation": "depois"}, message_id="B"),
        ]
    )

    assert [payload["messageId"] for _, payload in queue.published] == ["B"]
    assert provider.session.sent_texts == [(JID, SERVER_ERROR_REPLY)]
    assert len(records.messages) == 1


@pytest.mark.asyncio
async def test_malformed_location_gets_apology() -> None:
    loop, provider, _, queue, _ = _build()

    await loop.dispatch([make_payload({"locationMessage": {"degreesLatitude": 1.0}})])

    assert queue.published == []
    assert provider.session.sent_texts == [(JID, UNSUPPORTED_MESSAGE_REPLY)]


@pytest.mark.asyncio
async def test_non_numeric_latitude_gets_apology() -> None:
    loop, provider, _, queue, _ = _build()

    await loop.dispatch(
        [make_payload({"locationMessage": {"degreesLatitude": "norte", "degreesLongitude": 1.0}})]
    )

    assert queue.published == []
    assert provider.session.sent_texts == [(JID, UNSUPPORTED_MESSAGE_REPLY)]


@pytest.mark.asyncio
async def test_publish_failure_does_not_stop_batch() -> None:
    loop, provider, records, _, _ = _build(queue=FailingQueue())

    await loop.dispatch(
        [
            make_payload({"conversation": "a"}, message_id="A"),
            make_payload({"conversation": "b"}, message_id="B"),
        ]
    )

    assert len(records.messages) == 2
    assert provider.session.sent_texts == []
    # Só o mark-read do lote; nenhum item confirmado individualmente
    assert len(provider.session.read_batches) == 1


@pytest.mark.asyncio
async def test_mark_read_failure_is_best_effort() -> None:
    loop, provider, _, queue, _ = _build()
    provider.error = RuntimeError("sessão caiu")

    await loop.dispatch([make_payload({"conversation": "oi"})])

    assert len(queue.published) == 1


def test_message_content_and_location_helpers() -> None:
    base = {
        "message_id": "1",
        "chat_id": JID,
        "contact": {"id": JID},
        "source_type": "conversation",
    }
    text = TextMessage(**base, content="oi")
    location = LocationMessage(
        **{**base, "source_type": "locationMessage"}, latitude=0.0, longitude=0.0, address="Rua X"
    )

    assert message_content(text) == "oi"
    assert message_location(text) is None
    assert message_content(location) == "Rua X"
    assert message_location(location) == "0.0,0.0"


@pytest.mark.asyncio
async def test_server_problem_reply_send_failure_is_swallowed() -> None:
    session = FakeSession()
    session.download_error = ConnectionError("expired")
    session.send_error = RuntimeError("socket fechado")
    loop, _, _, queue, _ = _build(session)

    await loop.dispatch(
        [
            make_payload({"imageMessage": {}}, message_id="A"),
            make_payload({"conversation": "depois"}, message_id="B"),
        ]
    )

    assert [payload["messageId"] for _, payload in queue.published] == ["B"]
