"""Fila em memória, apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Mensagens se perdem no reinício.
"""

from __future__ import annotations

import asyncio
import copy
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.protocols.queue import QueueConsumerProtocol, QueuePublisherProtocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@dataclass(slots=True)
class MemoryDelivery:
    delivery_id: str
    payload: dict[str, Any]
    queue: MemoryQueue = field(repr=False)
    routing_key: str = ""
    outcome: str | None = None

    async def ack(self) -> None:
        if self.outcome is None:
            self.outcome = "acked"

    async def nack(self, requeue: bool = False) -> None:
        if self.outcome is not None:
            return
        self.outcome = "requeued" if requeue else "dropped"
        if requeue:
            await self.queue.publish(self.routing_key, self.payload)


class MemoryQueue(QueuePublisherProtocol, QueueConsumerProtocol):
    """Publisher e consumer sobre asyncio.Queue (dev/test)."""

    def __init__(self) -> None:
        self._queues: defaultdict[str, asyncio.Queue[dict[str, Any]]] = defaultdict(asyncio.Queue)
        self._counter = 0
        self.published: list[tuple[str, dict[str, Any]]] = []

    async def publish(self, routing_key: str, payload: dict[str, Any]) -> None:
        body = copy.deepcopy(payload)
        self.published.append((routing_key, body))
        await self._queues[routing_key].put(body)

    async def consume(
        self,
        queue_name: str,
        prefetch: int = 1,
    ) -> AsyncIterator[MemoryDelivery]:
        queue = self._queues[queue_name]
        while True:
            payload = await queue.get()
            self._counter += 1
            yield MemoryDelivery(
                delivery_id=str(self._counter),
                payload=payload,
                queue=self,
                routing_key=queue_name,
            )

    def pending(self, routing_key: str) -> int:
        return self._queues[routing_key].qsize()
