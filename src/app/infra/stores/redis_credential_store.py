"""Credential store em Redis.

Permite rodar a ponte em containers sem disco persistente. Um único
valor JSON sob `redis_key`.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from app.domain.credentials import Credentials
from app.protocols.credential_store import CredentialStoreProtocol
from utils.errors import AuthUnavailableError, RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)


class RedisCredentialStore(CredentialStoreProtocol):
    """Credenciais em uma chave Redis."""

    def __init__(self, redis_client: AsyncRedis, key: str) -> None:
        self._redis = redis_client
        self._key = key

    async def load(self) -> Credentials:
        try:
            raw = await self._redis.get(self._key)
        except Exception as exc:
            logger.error(
                "credentials_load_failed",
                extra={"backend": "redis", "error_type": type(exc).__name__},
            )
            msg = "Redis indisponível ao carregar credenciais"
            raise AuthUnavailableError(msg) from exc

        if raw is None:
            logger.info("credentials_not_found", extra={"backend": "redis"})
            return Credentials()
        try:
            data = json.loads(raw)
        except ValueError as exc:
            msg = f"Credenciais corrompidas em {self._key}"
            raise AuthUnavailableError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Credenciais corrompidas em {self._key}"
            raise AuthUnavailableError(msg)
        return Credentials.from_dict(data)

    async def save(self, credentials: Credentials) -> None:
        try:
            await self._redis.set(self._key, json.dumps(credentials.snapshot(), ensure_ascii=False))
        except Exception as exc:
            msg = "Falha ao salvar credenciais no Redis"
            raise RedisConnectionError(msg) from exc
        logger.debug("credentials_saved", extra={"backend": "redis"})

    async def delete(self) -> None:
        try:
            await self._redis.delete(self._key)
        except Exception as exc:
            msg = "Falha ao apagar credenciais no Redis"
            raise RedisConnectionError(msg) from exc
        logger.info("credentials_deleted", extra={"backend": "redis"})
