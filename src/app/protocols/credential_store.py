"""Contrato do armazenamento durável de credenciais."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.credentials import Credentials


class CredentialStoreProtocol(ABC):
    """Persistência do material de autenticação da sessão.

    Métodos:
    - load(): credenciais salvas, ou vazias se nunca houve pareamento
    - save(credentials): sobrescreve (última escrita vence)
    - delete(): remove tudo (logout remoto)
    """

    @abstractmethod
    async def load(self) -> Credentials:
        """Carrega as credenciais.

        Raises:
            AuthUnavailableError: Se o armazenamento estiver ilegível
                ou o conteúdo corrompido.
        """

    @abstractmethod
    async def save(self, credentials: Credentials) -> None:
        """Persiste as credenciais."""

    @abstractmethod
    async def delete(self) -> None:
        """Apaga as credenciais do armazenamento durável."""
