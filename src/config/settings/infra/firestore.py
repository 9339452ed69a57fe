"""Settings do Firestore.

Store de registros: contatos e mensagens recebidas.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

RecordStoreBackend = Literal["firestore", "memory"]


@dataclass(frozen=True)
class FirestoreSettings:
    """Configurações do Firestore.

    Attributes:
        backend: Implementação do record store (firestore|memory)
        project_id: ID do projeto GCP (usa GCP_PROJECT se não definido)
        database_id: Database Firestore (vazio = "(default)")
        collection_contacts: Collection de contatos
        collection_messages: Collection de mensagens
    """

    backend: RecordStoreBackend = "firestore"
    project_id: str = ""
    database_id: str = ""
    collection_contacts: str = "contacts"
    collection_messages: str = "messages"

    def validate(self, gcp_project: str) -> list[str]:
        """Valida configurações do Firestore.

        Args:
            gcp_project: Projeto GCP padrão para fallback.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend == "firestore" and not (self.project_id or gcp_project):
            errors.append("FIRESTORE_PROJECT_ID ou GCP_PROJECT deve estar configurado")

        if not self.collection_contacts or not self.collection_messages:
            errors.append("Nomes de collection não podem ser vazios")

        return errors


def _load_firestore_from_env() -> FirestoreSettings:
    """Carrega FirestoreSettings de variáveis de ambiente."""
    backend: RecordStoreBackend = (
        "memory"
        if os.getenv("RECORD_STORE_BACKEND", "firestore").lower() == "memory"
        else "firestore"
    )
    return FirestoreSettings(
        backend=backend,
        project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        database_id=os.getenv("FIRESTORE_DATABASE_ID", ""),
        collection_contacts=os.getenv("FIRESTORE_COLLECTION_CONTACTS", "contacts"),
        collection_messages=os.getenv("FIRESTORE_COLLECTION_MESSAGES", "messages"),
    )


@lru_cache(maxsize=1)
def get_firestore_settings() -> FirestoreSettings:
    """Retorna instância cacheada de FirestoreSettings."""
    return _load_firestore_from_env()
