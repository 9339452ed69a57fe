"""Agregador de settings da ponte WhatsApp.

Re-exporta as settings de cada domínio. Cada módulo expõe um dataclass
imutável carregado de variáveis de ambiente e um getter cacheado.
"""

from __future__ import annotations

from config.settings.ai import (
    OpenAISettings,
    get_openai_settings,
)
from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.infra import (
    CredentialSettings,
    CredentialsBackend,
    FirestoreSettings,
    GCSSettings,
    QueueBackend,
    QueueSettings,
    RecordStoreBackend,
    StorageBackend,
    get_credential_settings,
    get_firestore_settings,
    get_gcs_settings,
    get_queue_settings,
)
from config.settings.whatsapp import (
    RECEIVED_MESSAGE_ROUTING_KEY,
    SEND_MESSAGE_ROUTING_KEY,
    WhatsAppSessionSettings,
    get_whatsapp_session_settings,
)

__all__ = [
    # Constants
    "RECEIVED_MESSAGE_ROUTING_KEY",
    "SEND_MESSAGE_ROUTING_KEY",
    # Base
    "BaseSettings",
    "Environment",
    # Infrastructure
    "CredentialSettings",
    "CredentialsBackend",
    "FirestoreSettings",
    "GCSSettings",
    "QueueBackend",
    "QueueSettings",
    "RecordStoreBackend",
    "StorageBackend",
    # AI
    "OpenAISettings",
    # Channel
    "WhatsAppSessionSettings",
    "get_base_settings",
    "get_credential_settings",
    "get_firestore_settings",
    "get_gcs_settings",
    "get_openai_settings",
    "get_queue_settings",
    "get_whatsapp_session_settings",
]
