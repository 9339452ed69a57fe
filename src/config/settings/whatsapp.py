"""Settings da sessão WhatsApp.

Ciclo de vida da conexão (backoff de reconexão), transporte e
comportamento do pipeline inbound.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Routing keys compartilhadas com os consumidores downstream
RECEIVED_MESSAGE_ROUTING_KEY: str = "whatsapp.received.message"
SEND_MESSAGE_ROUTING_KEY: str = "whatsapp.send.message"


@dataclass(frozen=True)
class WhatsAppSessionSettings:
    """Configurações da sessão WhatsApp.

    Attributes:
        session_connector: Caminho "modulo:atributo" da factory do conector
            de transporte (biblioteca do protocolo)
        max_retries: Tentativas de reconexão antes do estado fatal
        retry_base_seconds: Base da escada de backoff (base * tentativa)
        retry_cap_seconds: Teto do atraso entre tentativas
        logged_out_delay_seconds: Atraso fixo da reconexão única após logout
        print_qr: Renderiza o QR de pareamento no terminal
        skip_status_broadcast: Ignora mensagens de status@broadcast
        echo_received: Reenvia cada mensagem recebida como pedido de envio
    """

    session_connector: str = ""

    # Escada de backoff
    max_retries: int = 100
    retry_base_seconds: float = 2.0
    retry_cap_seconds: float = 30.0
    logged_out_delay_seconds: float = 3.0

    # Pareamento
    print_qr: bool = True

    # Pipeline inbound
    skip_status_broadcast: bool = True
    echo_received: bool = False

    def validate(self) -> list[str]:
        """Valida configurações da sessão.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.session_connector:
            errors.append("SESSION_CONNECTOR não configurado")
        elif ":" not in self.session_connector:
            errors.append("SESSION_CONNECTOR deve ter o formato 'modulo:atributo'")

        if self.max_retries < 0:
            errors.append("WA_MAX_RETRIES deve ser >= 0")

        if self.retry_base_seconds <= 0:
            errors.append("WA_RETRY_BASE_SECONDS deve ser > 0")

        if self.retry_cap_seconds < self.retry_base_seconds:
            errors.append("WA_RETRY_CAP_SECONDS deve ser >= WA_RETRY_BASE_SECONDS")

        if self.logged_out_delay_seconds < 0:
            errors.append("WA_LOGGED_OUT_DELAY_SECONDS deve ser >= 0")

        return errors


def _load_whatsapp_session_from_env() -> WhatsAppSessionSettings:
    """Carrega WhatsAppSessionSettings de variáveis de ambiente."""
    return WhatsAppSessionSettings(
        session_connector=os.getenv("SESSION_CONNECTOR", ""),
        max_retries=int(os.getenv("WA_MAX_RETRIES", "100")),
        retry_base_seconds=float(os.getenv("WA_RETRY_BASE_SECONDS", "2.0")),
        retry_cap_seconds=float(os.getenv("WA_RETRY_CAP_SECONDS", "30.0")),
        logged_out_delay_seconds=float(os.getenv("WA_LOGGED_OUT_DELAY_SECONDS", "3.0")),
        print_qr=os.getenv("WA_PRINT_QR", "true").lower() in ("true", "1", "yes"),
        skip_status_broadcast=os.getenv("WA_SKIP_STATUS_BROADCAST", "true").lower()
        in ("true", "1", "yes"),
        echo_received=os.getenv("WA_ECHO_RECEIVED", "false").lower() in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_whatsapp_session_settings() -> WhatsAppSessionSettings:
    """Retorna instância cacheada de WhatsAppSessionSettings."""
    return _load_whatsapp_session_from_env()
