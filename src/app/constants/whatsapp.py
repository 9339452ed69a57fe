"""Constantes do protocolo WhatsApp usadas pela ponte."""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType


class SourceMessageType(StrEnum):
    """Campos de `message` do payload bruto reconhecidos pelo classificador.

    A ordem de declaração é a ordem de verificação.
    """

    CONVERSATION = "conversation"
    EXTENDED_TEXT = "extendedTextMessage"
    IMAGE = "imageMessage"
    VIDEO = "videoMessage"
    AUDIO = "audioMessage"
    DOCUMENT_WITH_CAPTION = "documentWithCaptionMessage"
    DOCUMENT = "documentMessage"
    LOCATION = "locationMessage"
    LIVE_LOCATION = "liveLocationMessage"


# Sufixos de JID
GROUP_JID_SUFFIX = "@g.us"
STATUS_BROADCAST_JID = "status@broadcast"

# MIME padrão quando o payload não informa
DEFAULT_IMAGE_MIME = "image/jpeg"
DEFAULT_VIDEO_MIME = "video/mp4"
DEFAULT_AUDIO_MIME = "audio/mpeg"
DEFAULT_DOCUMENT_MIME = "application/octet-stream"

# Extensões fixas
IMAGE_EXTENSION = "jpg"
AUDIO_EXTENSION = "mp3"
FALLBACK_EXTENSION = "bin"

DOCUMENT_EXTENSIONS: MappingProxyType[str, str] = MappingProxyType({
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
})
