"""Contrato do record store (contatos e mensagens)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.contact import ContactRecord


class RecordStoreProtocol(ABC):
    """Persistência de contatos e mensagens recebidas."""

    @abstractmethod
    async def find_contact_by_external_id(self, external_id: str) -> ContactRecord | None:
        """Busca contato pelo remoteJid."""

    @abstractmethod
    async def create_contact(self, contact: ContactRecord) -> ContactRecord:
        """Cria contato e retorna o registro com id."""

    @abstractmethod
    async def create_message(self, fields: dict[str, Any]) -> str:
        """Cria mensagem e retorna seu id."""
