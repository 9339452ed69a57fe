"""Loop de consumo de fila com limite de entregas em voo.

No máximo `prefetch` entregas processadas ao mesmo tempo (padrão 1,
preserva a ordem por chat). Falhas de leitura do broker são logadas e
o consumo é retomado após um intervalo.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from app.protocols.queue import QueueConsumerProtocol, QueueDelivery

logger = logging.getLogger(__name__)

DeliveryHandler = Callable[["QueueDelivery"], Awaitable[None]]


class QueueConsumerLoop:
    """Consome `queue_name` e entrega cada item ao handler."""

    def __init__(
        self,
        *,
        consumer: QueueConsumerProtocol,
        queue_name: str,
        handler: DeliveryHandler,
        prefetch: int = 1,
        retry_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._consumer = consumer
        self._queue_name = queue_name
        self._handler = handler
        self._prefetch = max(1, prefetch)
        self._retry_delay = retry_delay_seconds
        self._sleep = sleep
        self._active_tasks: set[asyncio.Task[Any]] = set()

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def in_flight(self) -> int:
        return len(self._active_tasks)

    async def run(self) -> None:
        """Consome até ser cancelado (ou até a fila terminar)."""
        semaphore = asyncio.Semaphore(self._prefetch)
        while True:
            try:
                finished = await self._consume(semaphore)
            except InfrastructureError as exc:
                logger.error(
                    "queue_consumer_failed",
                    extra={"routing_key": self._queue_name, "error_type": type(exc).__name__},
                )
                await self._sleep(self._retry_delay)
                continue
            if finished:
                logger.info("queue_consumer_finished", extra={"routing_key": self._queue_name})
                return

    async def _consume(self, semaphore: asyncio.Semaphore) -> bool:
        deliveries = self._consumer.consume(self._queue_name, self._prefetch)
        try:
            while True:
                await semaphore.acquire()
                try:
                    delivery = await anext(deliveries)
                except StopAsyncIteration:
                    semaphore.release()
                    return True
                except BaseException:
                    semaphore.release()
                    raise
                task = asyncio.create_task(self._run_one(delivery, semaphore))
                self._active_tasks.add(task)
                task.add_done_callback(self._on_task_done)
        finally:
            with contextlib.suppress(Exception):
                await deliveries.aclose()

    async def _run_one(self, delivery: QueueDelivery, semaphore: asyncio.Semaphore) -> None:
        try:
            await self._handler(delivery)
        finally:
            semaphore.release()

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._active_tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "queue_delivery_task_failed",
                    extra={"routing_key": self._queue_name, "error_type": type(exc).__name__},
                )

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda entregas em voo durante o shutdown."""
        if not self._active_tasks:
            return
        pending_now = list(self._active_tasks)
        logger.info(
            "queue_consumer_shutdown_wait",
            extra={"routing_key": self._queue_name, "pending_tasks": len(pending_now)},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "queue_consumer_shutdown_cancelled",
            extra={"routing_key": self._queue_name, "cancelled_tasks": len(pending)},
        )
