"""Contato persistido no record store.

Criado na primeira mensagem de um remoteJid (find-or-create) e nunca
apagado pela ponte.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContactRecord(BaseModel):
    """Contato do WhatsApp."""

    id: str = ""
    whatsapp_contact_id: str = Field(..., min_length=1)
    whatsapp_contact_name: str = ""
    number: str = ""
    is_group: bool = False
    from_me: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    def to_firestore_dict(self) -> dict[str, Any]:
        """Dict para persistência (sem o id do documento)."""
        return self.model_dump(exclude={"id"})

    @classmethod
    def from_firestore_dict(cls, document_id: str, data: dict[str, Any]) -> ContactRecord:
        return cls(id=document_id, **data)
