"""Settings de OpenAI.

Usado apenas para transcrição opcional de áudios recebidos (Whisper).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class OpenAISettings:
    """Configurações do OpenAI.

    Attributes:
        api_key: Chave da API OpenAI
        transcription_model: Modelo de transcrição
        timeout_seconds: Timeout das chamadas à API
        transcription_enabled: Se áudios recebidos devem ser transcritos
    """

    api_key: str = ""
    transcription_model: str = "whisper-1"
    timeout_seconds: float = 30.0
    transcription_enabled: bool = False

    @property
    def enabled(self) -> bool:
        """Transcrição ligada e com chave configurada."""
        return self.transcription_enabled and bool(self.api_key)

    def validate(self) -> list[str]:
        """Valida configurações do OpenAI.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.transcription_enabled and not self.api_key:
            errors.append(
                "OPENAI_API_KEY não configurado mas OPENAI_TRANSCRIPTION_ENABLED=true"
            )

        if self.timeout_seconds <= 0:
            errors.append("OPENAI_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_openai_from_env() -> OpenAISettings:
    """Carrega OpenAISettings de variáveis de ambiente."""
    return OpenAISettings(
        api_key=os.getenv("OPENAI_API_KEY", ""),
        transcription_model=os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1"),
        timeout_seconds=float(os.getenv("OPENAI_TIMEOUT_SECONDS", "30")),
        transcription_enabled=os.getenv("OPENAI_TRANSCRIPTION_ENABLED", "false").lower()
        in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_openai_settings() -> OpenAISettings:
    """Retorna instância cacheada de OpenAISettings."""
    return _load_openai_from_env()
