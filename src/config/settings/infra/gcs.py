"""Settings do Google Cloud Storage.

Bucket onde a mídia recebida (imagem, vídeo, áudio, documento) é arquivada.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

StorageBackend = Literal["gcs", "memory"]


@dataclass(frozen=True)
class GCSSettings:
    """Configurações do armazenamento de mídia.

    Attributes:
        backend: Implementação do object storage (gcs|memory)
        bucket_media: Bucket de mídia recebida
        auto_create_bucket: Cria o bucket se não existir
        location: Localização usada na criação do bucket
    """

    backend: StorageBackend = "gcs"
    bucket_media: str = ""
    auto_create_bucket: bool = True
    location: str = "US"

    def validate(self) -> list[str]:
        """Valida configurações do GCS.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.bucket_media:
            errors.append("GCS_BUCKET_MEDIA não configurado")

        return errors


def _load_gcs_from_env() -> GCSSettings:
    """Carrega GCSSettings de variáveis de ambiente."""
    backend: StorageBackend = (
        "memory" if os.getenv("STORAGE_BACKEND", "gcs").lower() == "memory" else "gcs"
    )
    return GCSSettings(
        backend=backend,
        bucket_media=os.getenv("GCS_BUCKET_MEDIA", "whatsapp-media"),
        auto_create_bucket=os.getenv("GCS_AUTO_CREATE_BUCKET", "true").lower()
        in ("true", "1", "yes"),
        location=os.getenv("GCS_LOCATION", "US"),
    )


@lru_cache(maxsize=1)
def get_gcs_settings() -> GCSSettings:
    """Retorna instância cacheada de GCSSettings."""
    return _load_gcs_from_env()
