"""Agregador de settings de infraestrutura.

Credenciais, fila, object storage e record store.
"""

from __future__ import annotations

from config.settings.infra.credentials import (
    CredentialSettings,
    CredentialsBackend,
    get_credential_settings,
)
from config.settings.infra.firestore import (
    FirestoreSettings,
    RecordStoreBackend,
    get_firestore_settings,
)
from config.settings.infra.gcs import (
    GCSSettings,
    StorageBackend,
    get_gcs_settings,
)
from config.settings.infra.queue import (
    QueueBackend,
    QueueSettings,
    get_queue_settings,
)

__all__ = [
    "CredentialSettings",
    "CredentialsBackend",
    "FirestoreSettings",
    "GCSSettings",
    "QueueBackend",
    "QueueSettings",
    "RecordStoreBackend",
    "StorageBackend",
    "get_credential_settings",
    "get_firestore_settings",
    "get_gcs_settings",
    "get_queue_settings",
]
