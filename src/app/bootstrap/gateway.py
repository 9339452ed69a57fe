"""Wiring da ponte: sessão, despacho de entrada e consumo de saída.

O gerenciador de conexão é a única fonte da sessão; o loop de despacho
e o sender só a obtêm via `get_session()`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.bootstrap.dependencies import (
    create_connector,
    create_credential_store,
    create_object_storage,
    create_queue,
    create_record_store,
    create_transcriber,
)
from app.coordinators.whatsapp.outbound.queue_consumer import QueueConsumerLoop
from app.infra.whatsapp import print_qr
from app.services.media_extraction import MediaExtractionPipeline
from app.sessions import ConnectionLifecycleManager, RetryState
from app.use_cases.whatsapp import EchoRelay, InboundDispatchLoop, OutboundSender
from config.settings import (
    get_gcs_settings,
    get_queue_settings,
    get_whatsapp_session_settings,
)

if TYPE_CHECKING:
    from app.protocols.queue import QueuePublisherProtocol
    from app.protocols.record_store import RecordStoreProtocol

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 30.0


@dataclass
class WhatsAppGateway:
    """Componentes vivos da ponte e suas tasks de fundo."""

    manager: ConnectionLifecycleManager
    dispatcher: InboundDispatchLoop
    sender: OutboundSender
    publisher: QueuePublisherProtocol
    record_store: RecordStoreProtocol
    consumers: list[QueueConsumerLoop] = field(default_factory=list)
    _tasks: list[asyncio.Task[Any]] = field(default_factory=list, repr=False)

    async def start(self) -> None:
        """Inicia sessão e consumidores em background."""
        for consumer in self.consumers:
            self._spawn(consumer.run(), name=f"consumer:{consumer.queue_name}")
        self._spawn(self.manager.start(), name="connection_start")
        logger.info("gateway_started", extra={"consumers": len(self.consumers)})

    async def stop(self, drain_timeout_seconds: float = SHUTDOWN_DRAIN_TIMEOUT_SECONDS) -> None:
        """Encerra consumidores, drena lotes pendentes e fecha a sessão."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        for consumer in self.consumers:
            await consumer.drain(drain_timeout_seconds)

        self.manager.suspend_reconnects()
        try:
            await asyncio.wait_for(self.manager.drain(), timeout=drain_timeout_seconds)
        except TimeoutError:
            logger.warning("gateway_drain_timeout", extra={"timeout_seconds": drain_timeout_seconds})

        await self.manager.stop()
        logger.info("gateway_stopped")

    def _spawn(self, coroutine: Any, *, name: str) -> None:
        task = asyncio.create_task(coroutine, name=name)
        task.add_done_callback(_on_background_task_done)
        self._tasks.append(task)


def _on_background_task_done(task: asyncio.Task[Any]) -> None:
    with contextlib.suppress(asyncio.CancelledError):
        exc = task.exception()
        if exc is not None:
            logger.error(
                "gateway_task_failed",
                extra={"task": task.get_name(), "error_type": type(exc).__name__},
            )


def build_gateway(*, on_fatal: Callable[[], None] | None = None) -> WhatsAppGateway:
    """Monta a ponte a partir das settings de ambiente."""
    session_settings = get_whatsapp_session_settings()
    queue_settings = get_queue_settings()

    queue = create_queue()
    record_store = create_record_store()

    manager = ConnectionLifecycleManager(
        connector=create_connector(),
        credential_store=create_credential_store(),
        retry=RetryState(
            max_attempts=session_settings.max_retries,
            base_seconds=session_settings.retry_base_seconds,
            cap_seconds=session_settings.retry_cap_seconds,
        ),
        logged_out_delay_seconds=session_settings.logged_out_delay_seconds,
        on_fatal=on_fatal,
        on_qr=print_qr if session_settings.print_qr else None,
    )

    dispatcher = InboundDispatchLoop(
        sessions=manager,
        record_store=record_store,
        publisher=queue,
        media_pipeline=MediaExtractionPipeline(
            sessions=manager,
            storage=create_object_storage(),
            bucket=get_gcs_settings().bucket_media,
            transcriber=create_transcriber(),
        ),
        routing_key=queue_settings.received_routing_key,
        skip_status_broadcast=session_settings.skip_status_broadcast,
    )
    manager.set_batch_handler(dispatcher.dispatch)

    sender = OutboundSender(
        sessions=manager,
        requeue_on_failure=queue_settings.requeue_on_failure,
    )
    consumers = [
        QueueConsumerLoop(
            consumer=queue,
            queue_name=queue_settings.send_routing_key,
            handler=sender.handle,
            prefetch=queue_settings.prefetch,
        )
    ]
    if session_settings.echo_received:
        relay = EchoRelay(publisher=queue, send_routing_key=queue_settings.send_routing_key)
        consumers.append(
            QueueConsumerLoop(
                consumer=queue,
                queue_name=queue_settings.received_routing_key,
                handler=relay.handle,
                prefetch=queue_settings.prefetch,
            )
        )

    logger.info(
        "gateway_built",
        extra={
            "queue_backend": queue_settings.backend,
            "echo_received": session_settings.echo_received,
        },
    )
    return WhatsAppGateway(
        manager=manager,
        dispatcher=dispatcher,
        sender=sender,
        publisher=queue,
        record_store=record_store,
        consumers=consumers,
    )
