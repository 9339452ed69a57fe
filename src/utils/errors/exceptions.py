"""Taxonomia de erros da ponte WhatsApp.

Falhas de sessão (ciclo de vida), falhas por mensagem (isoladas no loop
de despacho) e falhas de infraestrutura (adaptadores de Redis, Firestore
e object storage).
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base de todos os erros do domínio."""


# ──────────────────────────────────────────────────────────────────────────────
# Sessão
# ──────────────────────────────────────────────────────────────────────────────


class AuthUnavailableError(GatewayError):
    """Credenciais ilegíveis ou corrompidas. Fatal, sem retry."""


class TransientConnectionError(GatewayError):
    """Handshake ou conexão falhou de forma recuperável."""

    def __init__(self, message: str, close_reason: int | None = None) -> None:
        super().__init__(message)
        self.close_reason = close_reason


class LoggedOutError(GatewayError):
    """Autenticação revogada pelo serviço remoto."""


class SessionFatalError(GatewayError):
    """A sessão entrou no estado FATAL; nenhuma sessão será entregue."""


# ──────────────────────────────────────────────────────────────────────────────
# Por mensagem
# ──────────────────────────────────────────────────────────────────────────────


class MalformedPayloadError(GatewayError):
    """Payload recebido sem os campos exigidos pelo tipo reconhecido."""


class UnsupportedMessageError(GatewayError):
    """Tipo de mensagem sem processamento automatizado possível."""

    def __init__(self, source_type: str) -> None:
        super().__init__(f"Tipo de mensagem não suportado: {source_type}")
        self.source_type = source_type


class MediaUnavailableError(GatewayError):
    """Download ou arquivamento da mídia falhou."""


class DownstreamPublishError(GatewayError):
    """Publicação da mensagem canônica na fila falhou."""


# ──────────────────────────────────────────────────────────────────────────────
# Infraestrutura
# ──────────────────────────────────────────────────────────────────────────────


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class FirestoreUnavailableError(InfrastructureError):
    """Falha de indisponibilidade ao acessar Firestore."""


class ObjectStorageError(InfrastructureError):
    """Falha ao criar bucket ou gravar objeto."""
