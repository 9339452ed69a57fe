"""Contrato da fila de mensagens (publish/consume com ack/nack)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class QueueDelivery(Protocol):
    """Entrega consumida, pendente de ack ou nack."""

    @property
    def delivery_id(self) -> str: ...

    @property
    def payload(self) -> dict[str, Any]: ...

    async def ack(self) -> None: ...

    async def nack(self, requeue: bool = False) -> None: ...


class QueuePublisherProtocol(ABC):
    """Publicação fire-and-forget (at-most-once para a ponte)."""

    @abstractmethod
    async def publish(self, routing_key: str, payload: dict[str, Any]) -> None:
        """Publica payload JSON-serializável.

        Raises:
            RedisConnectionError: Falha de conexão com o broker.
        """


class QueueConsumerProtocol(ABC):
    """Consumo com confirmação explícita."""

    @abstractmethod
    def consume(self, queue_name: str, prefetch: int = 1) -> AsyncIterator[QueueDelivery]:
        """Itera entregas da fila; no máximo `prefetch` por leitura."""
