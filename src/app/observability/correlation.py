"""Correlation_id por unidade de trabalho.

Cada mensagem recebida (`wa:<message-id>`) e cada entrega da fila
(`queue:<entry-id>`) é processada sob seu próprio correlation_id, que o
filter de logging injeta em todo record. ContextVar mantém o valor
isolado por task asyncio.

Uso:
    from app.observability import correlation_scope

    with correlation_scope(f"wa:{message_id}"):
        ...
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id; gera UUID se None.

    Returns:
        Token para reset_correlation_id().
    """
    return _correlation_id.set(correlation_id or generate_correlation_id())


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Executa o bloco sob um correlation_id e restaura o anterior ao sair."""
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)
