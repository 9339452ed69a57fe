"""Testes do RedisStreamQueue com mock."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ResponseError

from app.infra.queue.redis_stream_queue import RedisStreamQueue
from utils.errors import RedisConnectionError

STREAM = "whatsapp.send-message"


def _queue(mock_redis: AsyncMock) -> RedisStreamQueue:
    return RedisStreamQueue(mock_redis, group="ponte", consumer="ponte-1", block_ms=100, maxlen=500)


class TestPublish:
    @pytest.mark.asyncio
    async def test_publish_xadds_json_payload(self) -> None:
        mock_redis = AsyncMock()

        await _queue(mock_redis).publish(STREAM, {"action": "text", "text": "olá"})

        mock_redis.xadd.assert_awaited_once()
        args, kwargs = mock_redis.xadd.await_args
        assert args[0] == STREAM
        assert json.loads(args[1]["payload"]) == {"action": "text", "text": "olá"}
        assert kwargs == {"maxlen": 500, "approximate": True}

    @pytest.mark.asyncio
    async def test_publish_failure_raises_redis_error(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xadd.side_effect = ConnectionError("refused")

        with pytest.raises(RedisConnectionError):
            await _queue(mock_redis).publish(STREAM, {})


class TestConsume:
    @pytest.mark.asyncio
    async def test_consume_creates_group_and_yields_deliveries(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xreadgroup.return_value = [
            (
                STREAM.encode(),
                [
                    (b"1-0", {b"payload": b'{"n": 1}'}),
                    (b"2-0", {b"payload": b"not json"}),
                    (b"3-0", {b"payload": b'{"n": 3}'}),
                ],
            )
        ]
        queue = _queue(mock_redis)
        deliveries = queue.consume(STREAM, prefetch=2)

        first = await anext(deliveries)
        second = await anext(deliveries)
        await deliveries.aclose()

        mock_redis.xgroup_create.assert_awaited_once_with(STREAM, "ponte", id="0", mkstream=True)
        assert mock_redis.xreadgroup.await_args.kwargs == {"count": 2, "block": 100}
        assert (first.delivery_id, first.payload) == ("1-0", {"n": 1})
        assert (second.delivery_id, second.payload) == ("3-0", {"n": 3})
        # Entrada ilegível confirmada e descartada
        mock_redis.xack.assert_awaited_once_with(STREAM, "ponte", "2-0")

    @pytest.mark.asyncio
    async def test_existing_group_is_tolerated(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xgroup_create.side_effect = ResponseError("BUSYGROUP Consumer Group name already exists")
        mock_redis.xreadgroup.return_value = [(STREAM, [("1-0", {"payload": "{}"})])]

        deliveries = _queue(mock_redis).consume(STREAM)
        delivery = await anext(deliveries)
        await deliveries.aclose()

        assert delivery.payload == {}

    @pytest.mark.asyncio
    async def test_read_failure_raises_redis_error(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xreadgroup.side_effect = ConnectionError("reset")

        with pytest.raises(RedisConnectionError):
            await anext(_queue(mock_redis).consume(STREAM))


class TestDelivery:
    @pytest.mark.asyncio
    async def test_ack_is_idempotent(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xreadgroup.return_value = [(STREAM, [("1-0", {"payload": "{}"})])]
        deliveries = _queue(mock_redis).consume(STREAM)
        delivery = await anext(deliveries)
        await deliveries.aclose()

        await delivery.ack()
        await delivery.ack()
        await delivery.nack()

        mock_redis.xack.assert_awaited_once_with(STREAM, "ponte", "1-0")

    @pytest.mark.asyncio
    async def test_nack_with_requeue_republishes_then_acks(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xreadgroup.return_value = [(STREAM, [("1-0", {"payload": '{"n": 1}'})])]
        deliveries = _queue(mock_redis).consume(STREAM)
        delivery = await anext(deliveries)
        await deliveries.aclose()

        await delivery.nack(requeue=True)

        assert json.loads(mock_redis.xadd.await_args.args[1]["payload"]) == {"n": 1}
        mock_redis.xack.assert_awaited_once_with(STREAM, "ponte", "1-0")

    @pytest.mark.asyncio
    async def test_nack_without_requeue_only_acks(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.xreadgroup.return_value = [(STREAM, [("1-0", {"payload": "{}"})])]
        deliveries = _queue(mock_redis).consume(STREAM)
        delivery = await anext(deliveries)
        await deliveries.aclose()

        await delivery.nack()

        mock_redis.xadd.assert_not_awaited()
        mock_redis.xack.assert_awaited_once()
