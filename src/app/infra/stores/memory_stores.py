"""Stores em memória, apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any

from app.domain.contact import ContactRecord
from app.domain.credentials import Credentials
from app.protocols.credential_store import CredentialStoreProtocol
from app.protocols.object_storage import ObjectStorageProtocol
from app.protocols.record_store import RecordStoreProtocol


class MemoryCredentialStore(CredentialStoreProtocol):
    """Credenciais em memória (dev/test)."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] | None = copy.deepcopy(initial) if initial else None
        self.save_count = 0
        self.delete_count = 0

    @property
    def data(self) -> dict[str, Any] | None:
        return self._data

    async def load(self) -> Credentials:
        return Credentials.from_dict(self._data or {})

    async def save(self, credentials: Credentials) -> None:
        self._data = credentials.snapshot()
        self.save_count += 1

    async def delete(self) -> None:
        self._data = None
        self.delete_count += 1


class MemoryRecordStore(RecordStoreProtocol):
    """Contatos e mensagens em memória (dev/test)."""

    def __init__(self) -> None:
        self.contacts: dict[str, ContactRecord] = {}
        self.messages: dict[str, dict[str, Any]] = {}

    async def find_contact_by_external_id(self, external_id: str) -> ContactRecord | None:
        for contact in self.contacts.values():
            if contact.whatsapp_contact_id == external_id:
                return contact
        return None

    async def create_contact(self, contact: ContactRecord) -> ContactRecord:
        record = contact.model_copy(update={"id": uuid.uuid4().hex})
        self.contacts[record.id] = record
        return record

    async def create_message(self, fields: dict[str, Any]) -> str:
        message_id = uuid.uuid4().hex
        self.messages[message_id] = dict(fields)
        return message_id


class MemoryObjectStorage(ObjectStorageProtocol):
    """Object storage em memória (dev/test)."""

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, tuple[bytes, str]]] = {}

    async def ensure_bucket(self, name: str) -> None:
        self.buckets.setdefault(name, {})

    async def put(self, bucket: str, key: str, data: bytes, mime_type: str) -> str:
        self.buckets.setdefault(bucket, {})[key] = (data, mime_type)
        return key
