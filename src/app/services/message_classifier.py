"""Classificação de payloads brutos em mensagens canônicas.

Função pura e determinística: percorre predicados de presença de campo
em ordem fixa e constrói a primeira variante que casar. A presença do
conteúdo faz parte do predicado, então o classificador nunca se
compromete com uma variante que não consegue preencher; payload sem
campo reconhecido vira UnknownMessage.

Derivações de mídia (reproduzidas exatamente para os consumidores):
- nome do arquivo: "{key.id}-{key.remoteJid}"
- caminho: "/{variante}/{nome}.{extensão}"
- extensão: imagem → jpg; vídeo → segundo segmento do MIME;
  áudio → mp3 sempre; documento → tabela MIME, padrão "bin"
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from app.constants.whatsapp import (
    AUDIO_EXTENSION,
    DEFAULT_AUDIO_MIME,
    DEFAULT_DOCUMENT_MIME,
    DEFAULT_IMAGE_MIME,
    DEFAULT_VIDEO_MIME,
    DOCUMENT_EXTENSIONS,
    FALLBACK_EXTENSION,
    GROUP_JID_SUFFIX,
    IMAGE_EXTENSION,
    SourceMessageType,
)
from app.domain.canonical_message import (
    AudioMessage,
    CanonicalMessage,
    ContactInfo,
    DocumentMessage,
    ImageMessage,
    LocationMessage,
    TextMessage,
    UnknownMessage,
    VideoMessage,
)
from utils.errors import MalformedPayloadError

_Builder = Callable[[dict[str, Any], Mapping[str, Any]], CanonicalMessage]


def classify(payload: Mapping[str, Any]) -> CanonicalMessage:
    """Mapeia um payload bruto para exatamente uma variante canônica.

    Args:
        payload: Mensagem no formato do protocolo (key, message, pushName...).

    Returns:
        Variante canônica; UnknownMessage se nenhum campo for reconhecido.

    Raises:
        MalformedPayloadError: Sem key.remoteJid/key.id, ou localização
            sem latitude/longitude.
    """
    common = _common_fields(payload)
    content = payload.get("message")
    if not isinstance(content, Mapping):
        content = {}

    for matcher in _MATCHERS:
        message = matcher(common, content)
        if message is not None:
            return message

    first_key = next(iter(content), None)
    return UnknownMessage(**common, source_type=first_key or "unknown")


def build_contact_info(payload: Mapping[str, Any]) -> ContactInfo:
    """Deriva o remetente a partir de key.remoteJid."""
    key = payload.get("key")
    if not isinstance(key, Mapping) or not key.get("remoteJid"):
        raise MalformedPayloadError("key.remoteJid ausente no payload")

    chat_id = str(key["remoteJid"])
    return ContactInfo(
        id=chat_id,
        name=payload.get("pushName") or payload.get("verifiedBizName") or "",
        number=chat_id.split("@")[0],
        is_group=chat_id.endswith(GROUP_JID_SUFFIX),
        is_me=bool(key.get("fromMe")),
    )


def document_extension(mime_type: str) -> str:
    """Extensão de documento pela tabela MIME; "bin" se não mapeado."""
    return DOCUMENT_EXTENSIONS.get(_base_mime(mime_type), FALLBACK_EXTENSION)


def video_extension(mime_type: str) -> str:
    """Segundo segmento do MIME, sem parâmetros (video/mp4 → mp4)."""
    parts = _base_mime(mime_type).split("/", 1)
    return parts[1] if len(parts) == 2 and parts[1] else FALLBACK_EXTENSION


def parse_timestamp(value: Any) -> datetime | None:
    """Converte messageTimestamp (epoch em int, str ou Long) para datetime UTC."""
    if isinstance(value, Mapping):
        # Long serializado: {"low": int, "high": int, "unsigned": bool}
        low = value.get("low")
        high = value.get("high") or 0
        if not isinstance(low, int):
            return None
        value = (high << 32) + (low & 0xFFFFFFFF)
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, UTC)
    except (OverflowError, OSError, ValueError):
        return None


# ──────────────────────────────────────────────────────────────────────────────
# Predicados (ordem importa)
# ──────────────────────────────────────────────────────────────────────────────


def _match_conversation(common: dict[str, Any], content: Mapping[str, Any]) -> CanonicalMessage | None:
    body = content.get(SourceMessageType.CONVERSATION)
    if not isinstance(body, str) or not body:
        return None
    return TextMessage(**common, source_type=SourceMessageType.CONVERSATION, content=body)


def _match_extended_text(
    common: dict[str, Any], content: Mapping[str, Any]
) -> CanonicalMessage | None:
    inner = _inner(content, SourceMessageType.EXTENDED_TEXT)
    text = inner.get("text") if inner is not None else None
    if not isinstance(text, str) or not text:
        return None
    return TextMessage(**common, source_type=SourceMessageType.EXTENDED_TEXT, content=text)


def _match_image(common: dict[str, Any], content: Mapping[str, Any]) -> CanonicalMessage | None:
    inner = _inner(content, SourceMessageType.IMAGE)
    if inner is None:
        return None
    mime_type = _mime_of(inner, DEFAULT_IMAGE_MIME)
    return ImageMessage(
        **common,
        **_media_fields(common, "image", mime_type, IMAGE_EXTENSION),
        source_type=SourceMessageType.IMAGE,
        caption=inner.get("caption") or "",
    )


def _match_video(common: dict[str, Any], content: Mapping[str, Any]) -> CanonicalMessage | None:
    inner = _inner(content, SourceMessageType.VIDEO)
    if inner is None:
        return None
    mime_type = _mime_of(inner, DEFAULT_VIDEO_MIME)
    return VideoMessage(
        **common,
        **_media_fields(common, "video", mime_type, video_extension(mime_type)),
        source_type=SourceMessageType.VIDEO,
        caption=inner.get("caption") or "",
    )


def _match_audio(common: dict[str, Any], content: Mapping[str, Any]) -> CanonicalMessage | None:
    inner = _inner(content, SourceMessageType.AUDIO)
    if inner is None:
        return None
    mime_type = _mime_of(inner, DEFAULT_AUDIO_MIME)
    # Extensão mp3 independentemente do MIME declarado (ex: audio/ogg; codecs=opus)
    return AudioMessage(
        **common,
        **_media_fields(common, "audio", mime_type, AUDIO_EXTENSION),
        source_type=SourceMessageType.AUDIO,
    )


def _match_document_with_caption(
    common: dict[str, Any], content: Mapping[str, Any]
) -> CanonicalMessage | None:
    wrapper = _inner(content, SourceMessageType.DOCUMENT_WITH_CAPTION)
    if wrapper is None:
        return None
    inner = _inner(wrapper.get("message") or {}, SourceMessageType.DOCUMENT)
    if inner is None:
        return None
    return _build_document(common, inner, SourceMessageType.DOCUMENT_WITH_CAPTION)


def _match_document(common: dict[str, Any], content: Mapping[str, Any]) -> CanonicalMessage | None:
    inner = _inner(content, SourceMessageType.DOCUMENT)
    if inner is None:
        return None
    return _build_document(common, inner, SourceMessageType.DOCUMENT)


def _match_location(common: dict[str, Any], content: Mapping[str, Any]) -> CanonicalMessage | None:
    for source_type in (SourceMessageType.LOCATION, SourceMessageType.LIVE_LOCATION):
        inner = _inner(content, source_type)
        if inner is None:
            continue
        latitude = inner.get("degreesLatitude")
        longitude = inner.get("degreesLongitude")
        if latitude is None or longitude is None:
            raise MalformedPayloadError(f"{source_type} sem latitude/longitude")
        return LocationMessage(
            **common,
            source_type=source_type,
            latitude=_coordinate(latitude, source_type),
            longitude=_coordinate(longitude, source_type),
            name=inner.get("name") or "",
            address=inner.get("address") or "",
            is_live=source_type == SourceMessageType.LIVE_LOCATION,
        )
    return None


_MATCHERS: tuple[_Builder, ...] = (
    _match_conversation,
    _match_extended_text,
    _match_image,
    _match_video,
    _match_audio,
    _match_document_with_caption,
    _match_document,
    _match_location,
)


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────


def _common_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    key = payload.get("key")
    if not isinstance(key, Mapping) or not key.get("id"):
        raise MalformedPayloadError("key.id ausente no payload")
    contact = build_contact_info(payload)
    return {
        "message_id": str(key["id"]),
        "chat_id": contact.id,
        "contact": contact,
        "timestamp": parse_timestamp(payload.get("messageTimestamp")),
        "original": dict(payload),
    }


def _inner(content: Mapping[str, Any], field: str) -> Mapping[str, Any] | None:
    value = content.get(field)
    return value if isinstance(value, Mapping) else None


def _media_fields(
    common: dict[str, Any],
    variant: str,
    mime_type: str,
    extension: str,
) -> dict[str, Any]:
    file_name = f"{common['message_id']}-{common['chat_id']}"
    return {
        "mime_type": mime_type,
        "extension": extension,
        "file_name": file_name,
        "storage_path": f"/{variant}/{file_name}.{extension}",
    }


def _build_document(
    common: dict[str, Any],
    inner: Mapping[str, Any],
    source_type: SourceMessageType,
) -> DocumentMessage:
    mime_type = _mime_of(inner, DEFAULT_DOCUMENT_MIME)
    return DocumentMessage(
        **common,
        **_media_fields(common, "document", mime_type, document_extension(mime_type)),
        source_type=source_type,
        caption=inner.get("caption") or "",
    )


def _mime_of(inner: Mapping[str, Any], default: str) -> str:
    mime_type = inner.get("mimetype") or default
    if not isinstance(mime_type, str):
        raise MalformedPayloadError(f"mimetype inválido: {type(mime_type).__name__}")
    return mime_type


def _coordinate(value: Any, source_type: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError(f"{source_type} com coordenada inválida") from exc


def _base_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()
