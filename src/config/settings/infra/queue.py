"""Settings da fila de mensagens (Redis Streams).

Cada routing key é um stream; consumidores usam consumer groups.
"""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from config.settings.whatsapp import (
    RECEIVED_MESSAGE_ROUTING_KEY,
    SEND_MESSAGE_ROUTING_KEY,
)

QueueBackend = Literal["redis", "memory"]


@dataclass(frozen=True)
class QueueSettings:
    """Configurações da fila.

    Attributes:
        backend: Implementação da fila (redis|memory)
        received_routing_key: Stream onde mensagens canônicas são publicadas
        send_routing_key: Stream de pedidos de envio consumidos pelo sender
        consumer_group: Consumer group dos streams
        consumer_name: Nome deste consumidor dentro do grupo
        prefetch: Entregas em voo por consumidor
        block_ms: Tempo máximo de bloqueio do XREADGROUP
        stream_maxlen: Tamanho aproximado máximo de cada stream
        requeue_on_failure: Reenfileira pedidos de envio que falharam
    """

    backend: QueueBackend = "redis"
    received_routing_key: str = RECEIVED_MESSAGE_ROUTING_KEY
    send_routing_key: str = SEND_MESSAGE_ROUTING_KEY
    consumer_group: str = "ponte-whatsapp"
    consumer_name: str = "ponte-whatsapp-1"
    prefetch: int = 1
    block_ms: int = 5000
    stream_maxlen: int = 10_000
    requeue_on_failure: bool = False

    def validate(self, redis_url: str) -> list[str]:
        """Valida configurações da fila.

        Args:
            redis_url: URL Redis das settings base.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in ("redis", "memory"):
            errors.append(f"QUEUE_BACKEND inválido: {self.backend}")

        if self.backend == "redis" and not redis_url:
            errors.append("REDIS_URL obrigatório quando QUEUE_BACKEND=redis")

        if self.prefetch < 1:
            errors.append("QUEUE_PREFETCH deve ser >= 1")

        if self.block_ms < 0:
            errors.append("QUEUE_BLOCK_MS deve ser >= 0")

        return errors


def _load_queue_from_env() -> QueueSettings:
    """Carrega QueueSettings de variáveis de ambiente."""
    backend: QueueBackend = (
        "memory" if os.getenv("QUEUE_BACKEND", "redis").lower() == "memory" else "redis"
    )
    return QueueSettings(
        backend=backend,
        received_routing_key=os.getenv(
            "QUEUE_RECEIVED_ROUTING_KEY", RECEIVED_MESSAGE_ROUTING_KEY
        ),
        send_routing_key=os.getenv("QUEUE_SEND_ROUTING_KEY", SEND_MESSAGE_ROUTING_KEY),
        consumer_group=os.getenv("QUEUE_CONSUMER_GROUP", "ponte-whatsapp"),
        consumer_name=os.getenv("QUEUE_CONSUMER_NAME", socket.gethostname()),
        prefetch=int(os.getenv("QUEUE_PREFETCH", "1")),
        block_ms=int(os.getenv("QUEUE_BLOCK_MS", "5000")),
        stream_maxlen=int(os.getenv("QUEUE_STREAM_MAXLEN", "10000")),
        requeue_on_failure=os.getenv("QUEUE_REQUEUE_ON_FAILURE", "false").lower()
        in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_queue_settings() -> QueueSettings:
    """Retorna instância cacheada de QueueSettings."""
    return _load_queue_from_env()
