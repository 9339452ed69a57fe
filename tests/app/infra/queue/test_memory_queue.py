"""Testes da fila em memória."""

from __future__ import annotations

import pytest

from app.infra.queue.memory_queue import MemoryQueue


@pytest.mark.asyncio
async def test_publish_then_consume_in_order() -> None:
    queue = MemoryQueue()
    await queue.publish("q", {"n": 1})
    await queue.publish("q", {"n": 2})

    deliveries = queue.consume("q")
    first = await anext(deliveries)
    second = await anext(deliveries)
    await deliveries.aclose()

    assert [first.payload, second.payload] == [{"n": 1}, {"n": 2}]
    assert queue.pending("q") == 0


@pytest.mark.asyncio
async def test_published_payload_is_copied() -> None:
    queue = MemoryQueue()
    payload = {"n": 1}

    await queue.publish("q", payload)
    payload["n"] = 2

    assert queue.published == [("q", {"n": 1})]


@pytest.mark.asyncio
async def test_nack_requeue_puts_payload_back() -> None:
    queue = MemoryQueue()
    await queue.publish("q", {"n": 1})
    deliveries = queue.consume("q")
    delivery = await anext(deliveries)
    await deliveries.aclose()

    await delivery.nack(requeue=True)
    await delivery.ack()

    assert delivery.outcome == "requeued"
    assert queue.pending("q") == 1
