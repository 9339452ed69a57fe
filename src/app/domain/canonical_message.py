"""Mensagem canônica publicada downstream.

Tagged union de variantes imutáveis, discriminada por `kind`. Cada
consumidor faz `match` exaustivo sobre as variantes; novos tipos entram
como nova variante + novo braço de `match`, nunca por herança de
comportamento.

No fio (fila), os campos usam camelCase (`storageKey`, `mimeType`,
`isGroup`) para compatibilidade com os consumidores existentes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
    # Payloads do protocolo carregam chaves de mídia binárias
    ser_json_bytes="base64",
)


class ContactInfo(BaseModel):
    """Remetente da mensagem, derivado de key.remoteJid."""

    model_config = _MODEL_CONFIG

    id: str
    name: str = ""
    number: str = ""
    is_group: bool = False
    is_me: bool = False


class _CanonicalBase(BaseModel):
    model_config = _MODEL_CONFIG

    message_id: str
    chat_id: str
    contact: ContactInfo
    timestamp: datetime | None = None
    # Campo do payload bruto que determinou a variante (ex: "extendedTextMessage")
    source_type: str
    original: dict[str, Any] = Field(default_factory=dict, repr=False)


class TextMessage(_CanonicalBase):
    kind: Literal["text"] = "text"
    content: str


class _MediaBase(_CanonicalBase):
    mime_type: str
    extension: str
    file_name: str
    storage_path: str
    # Preenchido pelo pipeline de mídia após o upload
    storage_key: str | None = None


class ImageMessage(_MediaBase):
    kind: Literal["image"] = "image"
    caption: str = ""


class VideoMessage(_MediaBase):
    kind: Literal["video"] = "video"
    caption: str = ""


class AudioMessage(_MediaBase):
    """Áudio; `content` recebe a transcrição quando habilitada."""

    kind: Literal["audio"] = "audio"
    content: str = ""


class DocumentMessage(_MediaBase):
    kind: Literal["document"] = "document"
    caption: str = ""


class LocationMessage(_CanonicalBase):
    kind: Literal["location"] = "location"
    latitude: float
    longitude: float
    name: str = ""
    address: str = ""
    is_live: bool = False


class UnknownMessage(_CanonicalBase):
    kind: Literal["unknown"] = "unknown"


CanonicalMessage = Annotated[
    TextMessage
    | ImageMessage
    | VideoMessage
    | AudioMessage
    | DocumentMessage
    | LocationMessage
    | UnknownMessage,
    Field(discriminator="kind"),
]

MediaMessage = ImageMessage | VideoMessage | AudioMessage | DocumentMessage

_CANONICAL_ADAPTER: TypeAdapter[CanonicalMessage] = TypeAdapter(CanonicalMessage)


def to_event(message: CanonicalMessage) -> dict[str, Any]:
    """Serializa a mensagem para publicação na fila (JSON, camelCase)."""
    return message.model_dump(mode="json", by_alias=True)


def from_event(payload: dict[str, Any]) -> CanonicalMessage:
    """Reconstrói a variante a partir do payload publicado."""
    return _CANONICAL_ADAPTER.validate_python(payload)
