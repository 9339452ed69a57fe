"""Record store em Firestore (contatos e mensagens recebidas).

Coleções:
    {collection_contacts}/{auto_id}: ContactRecord
    {collection_messages}/{auto_id}: mensagem persistida

O client Firestore é síncrono; chamadas rodam via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.cloud.firestore_v1.base_query import FieldFilter

from app.domain.contact import ContactRecord
from app.protocols.record_store import RecordStoreProtocol
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)


class FirestoreRecordStore(RecordStoreProtocol):
    """Contatos e mensagens no Firestore."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        *,
        collection_contacts: str = "contacts",
        collection_messages: str = "messages",
    ) -> None:
        self._db = firestore_client
        self._contacts = collection_contacts
        self._messages = collection_messages

    async def find_contact_by_external_id(self, external_id: str) -> ContactRecord | None:
        return await asyncio.to_thread(self._find_contact_sync, external_id)

    async def create_contact(self, contact: ContactRecord) -> ContactRecord:
        return await asyncio.to_thread(self._create_contact_sync, contact)

    async def create_message(self, fields: dict[str, Any]) -> str:
        return await asyncio.to_thread(self._create_message_sync, fields)

    def _find_contact_sync(self, external_id: str) -> ContactRecord | None:
        try:
            query = (
                self._db.collection(self._contacts)
                .where(filter=FieldFilter("whatsapp_contact_id", "==", external_id))
                .limit(1)
            )
            docs = list(query.stream())
        except Exception as exc:
            logger.error(
                "contact_lookup_failed",
                extra={"error_type": type(exc).__name__},
            )
            msg = "Firestore indisponível ao buscar contato"
            raise FirestoreUnavailableError(msg) from exc

        if not docs:
            return None
        return ContactRecord.from_firestore_dict(docs[0].id, docs[0].to_dict() or {})

    def _create_contact_sync(self, contact: ContactRecord) -> ContactRecord:
        try:
            doc_ref = self._db.collection(self._contacts).document()
            doc_ref.set(contact.to_firestore_dict())
        except Exception as exc:
            logger.error(
                "contact_create_failed",
                extra={"error_type": type(exc).__name__},
            )
            msg = "Firestore indisponível ao criar contato"
            raise FirestoreUnavailableError(msg) from exc
        logger.info("contact_created", extra={"contact_id": doc_ref.id})
        return contact.model_copy(update={"id": doc_ref.id})

    def _create_message_sync(self, fields: dict[str, Any]) -> str:
        try:
            doc_ref = self._db.collection(self._messages).document()
            doc_ref.set(fields)
        except Exception as exc:
            logger.error(
                "message_record_failed",
                extra={"error_type": type(exc).__name__},
            )
            msg = "Firestore indisponível ao gravar mensagem"
            raise FirestoreUnavailableError(msg) from exc
        return doc_ref.id
