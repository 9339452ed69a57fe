"""Contrato do object storage de mídia."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ObjectStorageProtocol(ABC):
    """Armazenamento de objetos por chave.

    Raises (todos os métodos):
        ObjectStorageError: Falha de rede ou permissão.
    """

    @abstractmethod
    async def ensure_bucket(self, name: str) -> None:
        """Garante que o bucket exista. Idempotente."""

    @abstractmethod
    async def put(self, bucket: str, key: str, data: bytes, mime_type: str) -> str:
        """Grava o objeto e retorna sua chave."""
