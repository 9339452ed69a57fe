"""Pedidos de envio consumidos da fila de saída.

Union discriminada por `action`. Produtores que devolvem uma mensagem
canônica (sem `action`) são lidos como pedido de texto: destino em
`contact.id` (ou `chatId`) e texto em `content`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from app.constants.whatsapp_fixed_replies import REACTION_ALIASES
from app.protocols.chat_session import Presence

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
    extra="ignore",
)


class TextSendRequest(BaseModel):
    model_config = _MODEL_CONFIG

    action: Literal["text"] = "text"
    chat_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class PresenceSendRequest(BaseModel):
    model_config = _MODEL_CONFIG

    action: Literal["presence"] = "presence"
    chat_id: str = Field(..., min_length=1)
    presence: Presence


class ReadSendRequest(BaseModel):
    model_config = _MODEL_CONFIG

    action: Literal["read"] = "read"
    keys: list[dict[str, Any]] = Field(..., min_length=1)


class ReactionSendRequest(BaseModel):
    """Reação a uma mensagem (`key` = chave da mensagem original)."""

    model_config = _MODEL_CONFIG

    action: Literal["reaction"] = "reaction"
    chat_id: str = Field(..., min_length=1)
    key: dict[str, Any]
    text: str = ""

    @property
    def emoji(self) -> str:
        """Texto com atalhos resolvidos (":like:" → 👍); vazio remove a reação."""
        return resolve_reaction(self.text)


SendRequest = Annotated[
    TextSendRequest | PresenceSendRequest | ReadSendRequest | ReactionSendRequest,
    Field(discriminator="action"),
]

_SEND_REQUEST_ADAPTER: TypeAdapter[SendRequest] = TypeAdapter(SendRequest)


def parse_send_request(payload: Mapping[str, Any]) -> SendRequest:
    """Valida o payload consumido.

    Raises:
        pydantic.ValidationError: Payload fora de qualquer formato aceito.
    """
    if "action" not in payload:
        payload = _text_request_from_canonical(payload)
    return _SEND_REQUEST_ADAPTER.validate_python(dict(payload))


def resolve_reaction(text: str) -> str:
    return REACTION_ALIASES.get(text.strip(), text)


def _text_request_from_canonical(payload: Mapping[str, Any]) -> dict[str, Any]:
    contact = payload.get("contact")
    chat_id = payload.get("chatId") or payload.get("chat_id")
    if not chat_id and isinstance(contact, Mapping):
        chat_id = contact.get("id")
    return {
        "action": "text",
        "chat_id": chat_id or "",
        "text": payload.get("content") or payload.get("text") or "",
    }
