"""Exceções compartilhadas."""

from .exceptions import (
    AuthUnavailableError,
    DownstreamPublishError,
    FirestoreUnavailableError,
    GatewayError,
    InfrastructureError,
    LoggedOutError,
    MalformedPayloadError,
    MediaUnavailableError,
    ObjectStorageError,
    RedisConnectionError,
    SessionFatalError,
    TransientConnectionError,
    UnsupportedMessageError,
)

__all__ = [
    "AuthUnavailableError",
    "DownstreamPublishError",
    "FirestoreUnavailableError",
    "GatewayError",
    "InfrastructureError",
    "LoggedOutError",
    "MalformedPayloadError",
    "MediaUnavailableError",
    "ObjectStorageError",
    "RedisConnectionError",
    "SessionFatalError",
    "TransientConnectionError",
    "UnsupportedMessageError",
]
