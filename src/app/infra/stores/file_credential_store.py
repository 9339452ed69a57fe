"""Credential store em arquivo local (diretório de autenticação).

Layout:
    {directory}/creds.json

Escrita atômica (arquivo temporário + replace). IO síncrono executado
via asyncio.to_thread para não bloquear o event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
from pathlib import Path

from app.domain.credentials import Credentials
from app.protocols.credential_store import CredentialStoreProtocol
from utils.errors import AuthUnavailableError

logger = logging.getLogger(__name__)

CREDENTIALS_FILE_NAME = "creds.json"


class FileCredentialStore(CredentialStoreProtocol):
    """Credenciais persistidas em JSON no disco."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._directory / CREDENTIALS_FILE_NAME

    async def load(self) -> Credentials:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, credentials: Credentials) -> None:
        data = credentials.snapshot()
        async with self._lock:
            await asyncio.to_thread(self._save_sync, data)

    async def delete(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._delete_sync)
        logger.info("credentials_deleted", extra={"backend": "file"})

    def _load_sync(self) -> Credentials:
        path = self.path
        if not path.exists():
            logger.info("credentials_not_found", extra={"backend": "file"})
            return Credentials()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error(
                "credentials_load_failed",
                extra={"backend": "file", "error_type": type(exc).__name__},
            )
            msg = f"Credenciais ilegíveis em {path}"
            raise AuthUnavailableError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Credenciais corrompidas em {path}"
            raise AuthUnavailableError(msg)
        return Credentials.from_dict(data)

    def _save_sync(self, data: dict) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.debug("credentials_saved", extra={"backend": "file"})

    def _delete_sync(self) -> None:
        if self._directory.exists():
            shutil.rmtree(self._directory)
