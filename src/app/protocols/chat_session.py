"""Contrato do transporte da sessão WhatsApp.

A biblioteca de protocolo é um colaborador externo. A ponte depende
apenas deste contrato: um conector que abre sessões a partir de
credenciais e uma sessão que emite eventos e executa comandos.

Eventos emitidos pela sessão:
- "creds-update": dict com o material de autenticação renovado
- "connection-update": ConnectionUpdate (ou mapping equivalente)
- "message-batch": {"messages": [payload, ...], "type": "notify"}

Payloads de mensagem são dicts compatíveis com JSON no formato do
protocolo (key.remoteJid, key.id, message.<tipo>, pushName, ...).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.credentials import Credentials

EVENT_CREDS_UPDATE = "creds-update"
EVENT_CONNECTION_UPDATE = "connection-update"
EVENT_MESSAGE_BATCH = "message-batch"

EventListener = Callable[[Any], Awaitable[None] | None]

Presence = Literal["available", "unavailable", "composing", "recording", "paused"]


class DisconnectReason(IntEnum):
    """Códigos de fechamento reportados pelo serviço remoto."""

    LOGGED_OUT = 401
    FORBIDDEN = 403
    CONNECTION_LOST = 408
    MULTIDEVICE_MISMATCH = 411
    CONNECTION_CLOSED = 428
    CONNECTION_REPLACED = 440
    BAD_SESSION = 500
    UNAVAILABLE_SERVICE = 503
    RESTART_REQUIRED = 515


@dataclass(frozen=True, slots=True)
class ConnectionUpdate:
    """Mudança de estado da conexão reportada pela sessão."""

    state: Literal["connecting", "open", "close"] | None = None
    close_reason: int | None = None
    qr: str | None = None

    @property
    def is_logged_out(self) -> bool:
        return self.state == "close" and self.close_reason == DisconnectReason.LOGGED_OUT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ConnectionUpdate:
        """Aceita tanto snake_case quanto o formato do protocolo.

        Formato do protocolo: {"connection": "close",
        "lastDisconnect": {"error": {"output": {"statusCode": 401}}}, "qr": "..."}
        """
        state = data.get("state", data.get("connection"))
        close_reason = data.get("close_reason", data.get("closeReason"))
        if close_reason is None:
            last = data.get("lastDisconnect") or {}
            error = last.get("error") if isinstance(last, Mapping) else None
            if isinstance(error, Mapping):
                output = error.get("output")
            else:
                output = getattr(error, "output", None)
            if isinstance(output, Mapping):
                close_reason = output.get("statusCode")
        qr = data.get("qr")
        return cls(
            state=state if state in ("connecting", "open", "close") else None,
            close_reason=int(close_reason) if close_reason is not None else None,
            qr=str(qr) if qr else None,
        )


@runtime_checkable
class ChatSessionProtocol(Protocol):
    """Sessão viva com o serviço remoto."""

    def on(self, event: str, listener: EventListener) -> None:
        """Registra listener para um evento."""
        ...

    def off(self, event: str, listener: EventListener) -> None:
        """Remove listener registrado com on()."""
        ...

    async def download_media(self, payload: Mapping[str, Any]) -> bytes:
        """Baixa a mídia referenciada pelo payload.

        Pode pedir re-upload ao remoto se o blob expirou; isso é
        responsabilidade do transporte.
        """
        ...

    async def send_text(self, chat_id: str, text: str) -> None: ...

    async def send_reaction(self, chat_id: str, key: Mapping[str, Any], text: str) -> None: ...

    async def set_presence(self, chat_id: str, presence: Presence) -> None: ...

    async def mark_read(self, keys: Sequence[Mapping[str, Any]]) -> None: ...

    async def close(self) -> None: ...


class SessionConnectorProtocol(Protocol):
    """Abre uma sessão a partir de credenciais."""

    async def connect(self, credentials: Credentials) -> ChatSessionProtocol:
        """Executa o handshake.

        Raises:
            LoggedOutError: Se o remoto rejeitar a identidade.
            Exception: Qualquer outra falha é tratada como transitória.
        """
        ...


class SessionProviderProtocol(Protocol):
    """Acesso à sessão viva (bloqueia até LIVE ou FATAL)."""

    async def get_session(self) -> ChatSessionProtocol: ...
