"""Object storage de mídia."""

from app.infra.storage.gcs_object_storage import GCSObjectStorage

__all__ = ["GCSObjectStorage"]
