"""Stores — implementações concretas de persistência.

Módulos disponíveis:
    - file_credential_store: Credenciais em arquivo local
    - redis_credential_store: Credenciais em Redis
    - firestore_record_store: Contatos e mensagens no Firestore
    - memory_stores: Stores em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.stores.file_credential_store import FileCredentialStore
from app.infra.stores.firestore_record_store import FirestoreRecordStore
from app.infra.stores.memory_stores import (
    MemoryCredentialStore,
    MemoryObjectStorage,
    MemoryRecordStore,
)
from app.infra.stores.redis_credential_store import RedisCredentialStore

__all__ = [
    # Credenciais
    "FileCredentialStore",
    "RedisCredentialStore",
    # Firestore
    "FirestoreRecordStore",
    # Memory (dev/test)
    "MemoryCredentialStore",
    "MemoryObjectStorage",
    "MemoryRecordStore",
]
