"""Implementações da fila de mensagens."""

from app.infra.queue.memory_queue import MemoryDelivery, MemoryQueue
from app.infra.queue.redis_stream_queue import RedisStreamDelivery, RedisStreamQueue

__all__ = [
    "MemoryDelivery",
    "MemoryQueue",
    "RedisStreamDelivery",
    "RedisStreamQueue",
]
