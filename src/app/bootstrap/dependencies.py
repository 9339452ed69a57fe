"""Factories de stores e adapters baseadas em configuração de ambiente.

Cada factory lê o backend da sua settings e devolve a implementação
concreta do protocolo correspondente.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.bootstrap.clients import (
    create_async_redis_client,
    create_firestore_client,
    create_storage_client,
)
from app.infra.queue import MemoryQueue, RedisStreamQueue
from app.infra.storage import GCSObjectStorage
from app.infra.stores import (
    FileCredentialStore,
    FirestoreRecordStore,
    MemoryCredentialStore,
    MemoryObjectStorage,
    MemoryRecordStore,
    RedisCredentialStore,
)
from app.infra.whatsapp import load_connector
from config.settings import (
    get_base_settings,
    get_credential_settings,
    get_firestore_settings,
    get_gcs_settings,
    get_openai_settings,
    get_queue_settings,
    get_whatsapp_session_settings,
)

if TYPE_CHECKING:
    from app.protocols.chat_session import SessionConnectorProtocol
    from app.protocols.credential_store import CredentialStoreProtocol
    from app.protocols.object_storage import ObjectStorageProtocol
    from app.protocols.record_store import RecordStoreProtocol
    from app.protocols.transcription_service import TranscriptionServiceProtocol

logger = logging.getLogger(__name__)


def _warn_memory_backend(component: str) -> None:
    environment = get_base_settings().environment
    if environment != "development":
        logger.warning(
            "memory_backend_in_non_dev",
            extra={"component": component, "environment": environment},
        )


def create_credential_store() -> CredentialStoreProtocol:
    """Cria credential store (CREDENTIALS_BACKEND: file | redis | memory)."""
    settings = get_credential_settings()

    if settings.backend == "redis":
        store: CredentialStoreProtocol = RedisCredentialStore(
            create_async_redis_client(), settings.redis_key
        )
    elif settings.backend == "memory":
        _warn_memory_backend("credential_store")
        store = MemoryCredentialStore()
    else:
        store = FileCredentialStore(settings.directory)

    logger.info("credential_store_created", extra={"backend": settings.backend})
    return store


def create_queue() -> MemoryQueue | RedisStreamQueue:
    """Cria a fila (publisher + consumer) conforme QUEUE_BACKEND."""
    settings = get_queue_settings()

    if settings.backend == "memory":
        _warn_memory_backend("queue")
        queue: MemoryQueue | RedisStreamQueue = MemoryQueue()
    else:
        queue = RedisStreamQueue(
            create_async_redis_client(),
            group=settings.consumer_group,
            consumer=settings.consumer_name,
            block_ms=settings.block_ms,
            maxlen=settings.stream_maxlen,
        )

    logger.info("queue_created", extra={"backend": settings.backend})
    return queue


def create_object_storage() -> ObjectStorageProtocol:
    """Cria object storage de mídia (STORAGE_BACKEND: gcs | memory)."""
    settings = get_gcs_settings()

    if settings.backend == "memory":
        _warn_memory_backend("object_storage")
        storage: ObjectStorageProtocol = MemoryObjectStorage()
    else:
        storage = GCSObjectStorage(
            create_storage_client(),
            auto_create_bucket=settings.auto_create_bucket,
            location=settings.location,
        )

    logger.info("object_storage_created", extra={"backend": settings.backend})
    return storage


def create_record_store() -> RecordStoreProtocol:
    """Cria record store (RECORD_STORE_BACKEND: firestore | memory)."""
    settings = get_firestore_settings()

    if settings.backend == "memory":
        _warn_memory_backend("record_store")
        store: RecordStoreProtocol = MemoryRecordStore()
    else:
        store = FirestoreRecordStore(
            create_firestore_client(),
            collection_contacts=settings.collection_contacts,
            collection_messages=settings.collection_messages,
        )

    logger.info("record_store_created", extra={"backend": settings.backend})
    return store


def create_transcriber() -> TranscriptionServiceProtocol | None:
    """Cria cliente Whisper se a transcrição estiver habilitada."""
    settings = get_openai_settings()
    if not settings.enabled:
        return None

    from app.infra.ai.whisper_client import WhisperClient

    logger.info("transcriber_created", extra={"model": settings.transcription_model})
    return WhisperClient(settings=settings)


def create_connector() -> SessionConnectorProtocol:
    """Carrega o conector do transporte (SESSION_CONNECTOR)."""
    return load_connector(get_whatsapp_session_settings().session_connector)
