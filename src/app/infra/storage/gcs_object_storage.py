"""Object storage de mídia no Google Cloud Storage.

Chave do objeto = caminho derivado pelo classificador sem a barra
inicial (ex: "image/ABC-5511...@s.whatsapp.net.jpg"). O client GCS é
síncrono; chamadas rodam via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from google.api_core.exceptions import Conflict

from app.protocols.object_storage import ObjectStorageProtocol
from utils.errors import ObjectStorageError

if TYPE_CHECKING:
    from google.cloud.storage import Client as StorageClient

logger = logging.getLogger(__name__)


class GCSObjectStorage(ObjectStorageProtocol):
    """Mídia recebida gravada em bucket GCS."""

    def __init__(
        self,
        storage_client: StorageClient,
        *,
        auto_create_bucket: bool = True,
        location: str = "US",
    ) -> None:
        self._client = storage_client
        self._auto_create = auto_create_bucket
        self._location = location
        self._ensured: set[str] = set()

    async def ensure_bucket(self, name: str) -> None:
        if name in self._ensured:
            return
        await asyncio.to_thread(self._ensure_bucket_sync, name)
        self._ensured.add(name)

    async def put(self, bucket: str, key: str, data: bytes, mime_type: str) -> str:
        return await asyncio.to_thread(self._put_sync, bucket, key, data, mime_type)

    def _ensure_bucket_sync(self, name: str) -> None:
        try:
            if self._client.lookup_bucket(name) is not None:
                return
            if not self._auto_create:
                msg = f"Bucket inexistente: {name}"
                raise ObjectStorageError(msg)
            self._client.create_bucket(name, location=self._location)
            logger.info("bucket_created", extra={"bucket": name})
        except Conflict:
            # Criado por outra instância entre o lookup e o create
            logger.info("bucket_already_exists", extra={"bucket": name})
        except ObjectStorageError:
            raise
        except Exception as exc:
            logger.error(
                "bucket_ensure_failed",
                extra={"bucket": name, "error_type": type(exc).__name__},
            )
            msg = f"Falha ao garantir bucket {name}"
            raise ObjectStorageError(msg) from exc

    def _put_sync(self, bucket: str, key: str, data: bytes, mime_type: str) -> str:
        object_name = key.lstrip("/")
        try:
            blob = self._client.bucket(bucket).blob(object_name)
            blob.upload_from_string(data, content_type=mime_type)
        except Exception as exc:
            logger.error(
                "object_upload_failed",
                extra={"bucket": bucket, "error_type": type(exc).__name__},
            )
            msg = f"Falha ao gravar objeto em {bucket}"
            raise ObjectStorageError(msg) from exc
        return object_name
