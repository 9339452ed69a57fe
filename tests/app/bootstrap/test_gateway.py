"""Testes do wiring da ponte com backends em memória."""

from __future__ import annotations

import asyncio

import pytest

from app.bootstrap.dependencies import create_transcriber
from app.bootstrap.gateway import WhatsAppGateway, build_gateway
from app.infra.queue.memory_queue import MemoryQueue
from app.infra.stores.memory_stores import MemoryRecordStore
from app.protocols.chat_session import (
    EVENT_CONNECTION_UPDATE,
    EVENT_MESSAGE_BATCH,
    DisconnectReason,
)
from config.settings import RECEIVED_MESSAGE_ROUTING_KEY, SEND_MESSAGE_ROUTING_KEY
from fsm import ConnectionState
from tests.fakes.fake_whatsapp import make_payload

_MEMORY_ENV = {
    "SESSION_CONNECTOR": "tests.fakes.fake_whatsapp:FakeConnector",
    "QUEUE_BACKEND": "memory",
    "CREDENTIALS_BACKEND": "memory",
    "STORAGE_BACKEND": "memory",
    "RECORD_STORE_BACKEND": "memory",
    "WA_PRINT_QR": "false",
}


@pytest.fixture
def memory_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key, value in _MEMORY_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("OPENAI_TRANSCRIPTION_ENABLED", raising=False)
    monkeypatch.delenv("WA_ECHO_RECEIVED", raising=False)


async def _wait_live(gateway: WhatsAppGateway) -> None:
    for _ in range(100):
        if gateway.manager.is_live:
            return
        await asyncio.sleep(0)
    raise AssertionError("sessão não ficou LIVE")


def test_build_gateway_with_memory_backends(memory_env: None) -> None:
    gateway = build_gateway()

    assert isinstance(gateway.publisher, MemoryQueue)
    assert isinstance(gateway.record_store, MemoryRecordStore)
    assert [c.queue_name for c in gateway.consumers] == [SEND_MESSAGE_ROUTING_KEY]
    assert gateway.manager.state is ConnectionState.IDLE


def test_echo_adds_received_consumer(
    memory_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WA_ECHO_RECEIVED", "true")

    gateway = build_gateway()

    assert [c.queue_name for c in gateway.consumers] == [
        SEND_MESSAGE_ROUTING_KEY,
        RECEIVED_MESSAGE_ROUTING_KEY,
    ]


def test_transcriber_disabled_by_default(memory_env: None) -> None:
    assert create_transcriber() is None


@pytest.mark.asyncio
async def test_gateway_round_trip(memory_env: None) -> None:
    gateway = build_gateway()
    queue = gateway.publisher
    assert isinstance(queue, MemoryQueue)

    await gateway.start()
    await _wait_live(gateway)
    session = await gateway.manager.get_session()

    # Entrada: lote do transporte vira mensagem canônica publicada
    await session.emit(
        EVENT_MESSAGE_BATCH,
        {"messages": [make_payload({"conversation": "olá"})], "type": "notify"},
    )
    await gateway.manager.drain()

    received = [body for key, body in queue.published if key == RECEIVED_MESSAGE_ROUTING_KEY]
    assert len(received) == 1
    assert received[0]["kind"] == "text"
    assert received[0]["content"] == "olá"

    # Saída: pedido de envio consumido e executado na sessão
    await queue.publish(
        SEND_MESSAGE_ROUTING_KEY,
        {"action": "text", "chatId": "5511@s.whatsapp.net", "text": "oi"},
    )
    for _ in range(100):
        if session.sent_texts:
            break
        await asyncio.sleep(0)

    await gateway.stop(drain_timeout_seconds=1.0)

    assert session.sent_texts == [("5511@s.whatsapp.net", "oi")]
    assert session.closed is True
    assert gateway.manager.state is ConnectionState.IDLE


@pytest.mark.asyncio
async def test_stop_during_backoff_does_not_open_new_session(
    memory_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WA_RETRY_BASE_SECONDS", "0.05")
    gateway = build_gateway()
    await gateway.start()
    await _wait_live(gateway)
    session = await gateway.manager.get_session()

    await session.emit(
        EVENT_CONNECTION_UPDATE,
        {
            "connection": "close",
            "lastDisconnect": {
                "error": {"output": {"statusCode": DisconnectReason.CONNECTION_LOST}}
            },
        },
    )
    for _ in range(100):
        if gateway.manager.snapshot()["reconnect_scheduled"]:
            break
        await asyncio.sleep(0)
    assert gateway.manager.snapshot()["reconnect_scheduled"] is True

    await gateway.stop(drain_timeout_seconds=1.0)
    await asyncio.sleep(0.1)

    live_entries = [t for t in gateway.manager.fsm.history if t.to_state is ConnectionState.LIVE]
    assert len(live_entries) == 1
    assert session.closed is True
    assert gateway.manager.state is ConnectionState.IDLE
    assert gateway.manager.snapshot()["reconnect_scheduled"] is False
