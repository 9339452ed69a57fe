"""Factories de clientes externos: Redis, Firestore e Cloud Storage."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from config.settings import get_base_settings, get_firestore_settings

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient
    from google.cloud.storage import Client as StorageClient
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_async_redis_client() -> AsyncRedis:
    """Cria cliente Redis assíncrono (singleton).

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    redis_url = get_base_settings().redis_url
    if not redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client: AsyncRedis = AsyncRedis.from_url(
        redis_url,
        decode_responses=False,
        socket_connect_timeout=5.0,
        health_check_interval=30,
    )
    host = client.connection_pool.connection_kwargs.get("host", "unknown")
    logger.info("async_redis_client_created", extra={"host": host})
    return client


# ──────────────────────────────────────────────────────────────────────────────
# Google Cloud Client Factories
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_firestore_client() -> FirestoreClient:
    """Cria cliente Firestore (singleton)."""
    from google.cloud import firestore

    settings = get_firestore_settings()
    project_id = settings.project_id or get_base_settings().gcp_project or None
    if settings.database_id:
        client = firestore.Client(project=project_id, database=settings.database_id)
    else:
        client = firestore.Client(project=project_id)
    logger.info("firestore_client_created", extra={"project": project_id})
    return client


@lru_cache(maxsize=1)
def create_storage_client() -> StorageClient:
    """Cria cliente Cloud Storage (singleton)."""
    from google.cloud import storage

    project_id = get_base_settings().gcp_project or None
    client = storage.Client(project=project_id)
    logger.info("storage_client_created", extra={"project": project_id})
    return client
