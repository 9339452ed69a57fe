"""Protocolos e contratos do core da ponte."""

from .chat_session import (
    EVENT_CONNECTION_UPDATE,
    EVENT_CREDS_UPDATE,
    EVENT_MESSAGE_BATCH,
    ChatSessionProtocol,
    ConnectionUpdate,
    DisconnectReason,
    EventListener,
    Presence,
    SessionConnectorProtocol,
    SessionProviderProtocol,
)
from .credential_store import CredentialStoreProtocol
from .object_storage import ObjectStorageProtocol
from .queue import QueueConsumerProtocol, QueueDelivery, QueuePublisherProtocol
from .record_store import RecordStoreProtocol
from .transcription_service import TranscriptionResult, TranscriptionServiceProtocol

__all__ = [
    "EVENT_CONNECTION_UPDATE",
    "EVENT_CREDS_UPDATE",
    "EVENT_MESSAGE_BATCH",
    "ChatSessionProtocol",
    "ConnectionUpdate",
    "CredentialStoreProtocol",
    "DisconnectReason",
    "EventListener",
    "ObjectStorageProtocol",
    "Presence",
    "QueueConsumerProtocol",
    "QueueDelivery",
    "QueuePublisherProtocol",
    "RecordStoreProtocol",
    "SessionConnectorProtocol",
    "SessionProviderProtocol",
    "TranscriptionResult",
    "TranscriptionServiceProtocol",
]
