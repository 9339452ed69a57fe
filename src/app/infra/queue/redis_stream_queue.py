"""Fila sobre Redis Streams.

Cada routing key é um stream. Publicação via XADD com o payload JSON
no campo "payload"; consumo via consumer group (XREADGROUP) com ack
explícito (XACK). nack com requeue republica no fim do stream e
confirma a entrega original.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from redis.exceptions import ResponseError

from app.protocols.queue import QueueConsumerProtocol, QueuePublisherProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

PAYLOAD_FIELD = "payload"


def _text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


@dataclass(slots=True)
class RedisStreamDelivery:
    """Entrega pendente no PEL do consumer group."""

    delivery_id: str
    payload: dict[str, Any]
    stream: str
    queue: RedisStreamQueue = field(repr=False)
    settled: bool = False

    async def ack(self) -> None:
        if self.settled:
            return
        self.settled = True
        await self.queue.acknowledge(self.stream, self.delivery_id)

    async def nack(self, requeue: bool = False) -> None:
        if self.settled:
            return
        self.settled = True
        if requeue:
            await self.queue.publish(self.stream, self.payload)
        await self.queue.acknowledge(self.stream, self.delivery_id)
        logger.info(
            "queue_message_rejected",
            extra={"routing_key": self.stream, "requeue": requeue},
        )


class RedisStreamQueue(QueuePublisherProtocol, QueueConsumerProtocol):
    """Publisher e consumer sobre Redis Streams.

    Args:
        redis_client: Cliente Redis assíncrono
        group: Nome do consumer group
        consumer: Nome deste consumidor dentro do grupo
        block_ms: Tempo máximo de bloqueio do XREADGROUP
        maxlen: Tamanho aproximado máximo de cada stream
    """

    def __init__(
        self,
        redis_client: AsyncRedis,
        *,
        group: str,
        consumer: str,
        block_ms: int = 5000,
        maxlen: int = 10_000,
    ) -> None:
        self._redis = redis_client
        self._group = group
        self._consumer = consumer
        self._block_ms = block_ms
        self._maxlen = maxlen

    async def publish(self, routing_key: str, payload: dict[str, Any]) -> None:
        body = json.dumps(payload, ensure_ascii=False)
        try:
            await self._redis.xadd(
                routing_key,
                {PAYLOAD_FIELD: body},
                maxlen=self._maxlen,
                approximate=True,
            )
        except Exception as exc:
            logger.error(
                "queue_publish_failed",
                extra={"routing_key": routing_key, "error_type": type(exc).__name__},
            )
            msg = f"Falha ao publicar em {routing_key}"
            raise RedisConnectionError(msg) from exc
        logger.debug("queue_message_published", extra={"routing_key": routing_key})

    async def consume(
        self,
        queue_name: str,
        prefetch: int = 1,
    ) -> AsyncIterator[RedisStreamDelivery]:
        await self._ensure_group(queue_name)
        logger.info(
            "queue_consumer_started",
            extra={"routing_key": queue_name, "group": self._group, "prefetch": prefetch},
        )
        while True:
            try:
                response = await self._redis.xreadgroup(
                    self._group,
                    self._consumer,
                    {queue_name: ">"},
                    count=max(1, prefetch),
                    block=self._block_ms,
                )
            except Exception as exc:
                msg = f"Falha ao ler {queue_name}"
                raise RedisConnectionError(msg) from exc

            for _stream, entries in response or []:
                for entry_id, fields in entries:
                    delivery = await self._to_delivery(queue_name, _text(entry_id), fields)
                    if delivery is not None:
                        yield delivery

    async def acknowledge(self, stream: str, delivery_id: str) -> None:
        try:
            await self._redis.xack(stream, self._group, delivery_id)
        except Exception as exc:
            msg = f"Falha ao confirmar entrega em {stream}"
            raise RedisConnectionError(msg) from exc

    async def _ensure_group(self, stream: str) -> None:
        try:
            await self._redis.xgroup_create(stream, self._group, id="0", mkstream=True)
            logger.info("queue_group_created", extra={"routing_key": stream, "group": self._group})
        except ResponseError as exc:
            if "BUSYGROUP" not in str(exc):
                raise RedisConnectionError(f"Falha ao criar grupo em {stream}") from exc
        except Exception as exc:
            raise RedisConnectionError(f"Falha ao criar grupo em {stream}") from exc

    async def _to_delivery(
        self,
        stream: str,
        entry_id: str,
        fields: dict[Any, Any],
    ) -> RedisStreamDelivery | None:
        raw = fields.get(PAYLOAD_FIELD, fields.get(PAYLOAD_FIELD.encode()))
        try:
            payload = json.loads(raw) if raw is not None else None
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            # Entrada ilegível nunca será processada; confirma e descarta
            logger.warning(
                "queue_message_undecodable",
                extra={"routing_key": stream, "delivery_id": entry_id},
            )
            await self.acknowledge(stream, entry_id)
            return None
        return RedisStreamDelivery(
            delivery_id=entry_id,
            payload=payload,
            stream=stream,
            queue=self,
        )
