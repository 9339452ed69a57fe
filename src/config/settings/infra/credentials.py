"""Settings do armazenamento de credenciais da sessão."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

CredentialsBackend = Literal["file", "redis", "memory"]


@dataclass(frozen=True)
class CredentialSettings:
    """Configurações do CredentialStore.

    Attributes:
        backend: Onde o material de autenticação é persistido
        directory: Diretório do backend "file" (creds.json)
        redis_key: Chave do backend "redis"
    """

    backend: CredentialsBackend = "file"
    directory: str = "auth_info"
    redis_key: str = "whatsapp:credentials"

    def validate(self) -> list[str]:
        """Valida configurações de credenciais.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in ("file", "redis", "memory"):
            errors.append(f"CREDENTIALS_BACKEND inválido: {self.backend}")

        if self.backend == "file" and not self.directory:
            errors.append("CREDENTIALS_DIR obrigatório quando CREDENTIALS_BACKEND=file")

        if self.backend == "redis" and not self.redis_key:
            errors.append("CREDENTIALS_REDIS_KEY obrigatório quando CREDENTIALS_BACKEND=redis")

        return errors


def _parse_backend(value: str) -> CredentialsBackend:
    value_lower = value.lower()
    if value_lower == "redis":
        return "redis"
    if value_lower == "memory":
        return "memory"
    return "file"


def _load_credentials_from_env() -> CredentialSettings:
    """Carrega CredentialSettings de variáveis de ambiente."""
    return CredentialSettings(
        backend=_parse_backend(os.getenv("CREDENTIALS_BACKEND", "file")),
        directory=os.getenv("CREDENTIALS_DIR", "auth_info"),
        redis_key=os.getenv("CREDENTIALS_REDIS_KEY", "whatsapp:credentials"),
    )


@lru_cache(maxsize=1)
def get_credential_settings() -> CredentialSettings:
    """Retorna instância cacheada de CredentialSettings."""
    return _load_credentials_from_env()
