"""Testes do classificador de payloads."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.domain.canonical_message import (
    AudioMessage,
    DocumentMessage,
    ImageMessage,
    LocationMessage,
    TextMessage,
    UnknownMessage,
    VideoMessage,
    from_event,
    to_event,
)
from app.services.message_classifier import (
    build_contact_info,
    classify,
    document_extension,
    parse_timestamp,
    video_extension,
)
from tests.fakes.fake_whatsapp import make_payload
from utils.errors import MalformedPayloadError

JID = "5511999999999@s.whatsapp.net"


class TestTextVariants:
    def test_conversation_becomes_text(self) -> None:
        message = classify(make_payload({"conversation": "Oi"}))

        assert isinstance(message, TextMessage)
        assert message.content == "Oi"
        assert message.source_type == "conversation"
        assert message.chat_id == JID
        assert message.contact.name == "Maria"
        assert message.contact.number == "5511999999999"
        assert message.timestamp == datetime.fromtimestamp(1_700_000_000, UTC)

    def test_extended_text_becomes_text(self) -> None:
        message = classify(make_payload({"extendedTextMessage": {"text": "link https://x"}}))

        assert isinstance(message, TextMessage)
        assert message.content == "link https://x"
        assert message.source_type == "extendedTextMessage"

    def test_empty_conversation_is_not_text(self) -> None:
        message = classify(make_payload({"conversation": ""}))

        assert isinstance(message, UnknownMessage)
        assert message.source_type == "conversation"


class TestMediaVariants:
    def test_image_uses_jpg_and_caption(self) -> None:
        message = classify(
            make_payload({"imageMessage": {"mimetype": "image/png", "caption": "foto"}})
        )

        assert isinstance(message, ImageMessage)
        assert message.extension == "jpg"
        assert message.mime_type == "image/png"
        assert message.caption == "foto"
        assert message.file_name == f"MSG1-{JID}"
        assert message.storage_path == f"/image/MSG1-{JID}.jpg"
        assert message.storage_key is None

    def test_video_extension_from_mime(self) -> None:
        message = classify(make_payload({"videoMessage": {"mimetype": "video/mp4"}}))

        assert isinstance(message, VideoMessage)
        assert message.extension == "mp4"
        assert message.storage_path == f"/video/MSG1-{JID}.mp4"

    def test_audio_is_always_mp3(self) -> None:
        message = classify(
            make_payload({"audioMessage": {"mimetype": "audio/ogg; codecs=opus", "ptt": True}})
        )

        assert isinstance(message, AudioMessage)
        assert message.extension == "mp3"
        assert message.mime_type == "audio/ogg; codecs=opus"
        assert message.storage_path == f"/audio/MSG1-{JID}.mp3"
        assert message.content == ""

    @pytest.mark.parametrize(
        ("mime_type", "extension"),
        [
            ("application/pdf", "pdf"),
            ("application/msword", "doc"),
            (
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                "docx",
            ),
            ("application/vnd.ms-excel", "xls"),
            (
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                "xlsx",
            ),
            ("application/zip", "bin"),
        ],
    )
    def test_document_extension_table(self, mime_type: str, extension: str) -> None:
        message = classify(make_payload({"documentMessage": {"mimetype": mime_type}}))

        assert isinstance(message, DocumentMessage)
        assert message.extension == extension
        assert message.storage_path == f"/document/MSG1-{JID}.{extension}"

    def test_document_without_mime_defaults_to_bin(self) -> None:
        message = classify(make_payload({"documentMessage": {"fileName": "a"}}))

        assert isinstance(message, DocumentMessage)
        assert message.mime_type == "application/octet-stream"
        assert message.extension == "bin"

    @pytest.mark.parametrize(
        "field",
        ["documentMessage", "imageMessage", "videoMessage", "audioMessage"],
    )
    def test_non_string_mimetype_is_malformed(self, field: str) -> None:
        with pytest.raises(MalformedPayloadError):
            classify(make_payload({field: {"mimetype": 42}}))

    def test_document_with_caption_unwraps_inner_document(self) -> None:
        payload = make_payload(
            {
                "documentWithCaptionMessage": {
                    "message": {
                        "documentMessage": {"mimetype": "application/pdf", "caption": "contrato"}
                    }
                }
            }
        )

        message = classify(payload)

        assert isinstance(message, DocumentMessage)
        assert message.source_type == "documentWithCaptionMessage"
        assert message.caption == "contrato"
        assert message.extension == "pdf"


class TestLocation:
    def test_location_coordinates(self) -> None:
        message = classify(
            make_payload(
                {
                    "locationMessage": {
                        "degreesLatitude": -23.55,
                        "degreesLongitude": -46.63,
                        "name": "Sé",
                    }
                }
            )
        )

        assert isinstance(message, LocationMessage)
        assert (message.latitude, message.longitude) == (-23.55, -46.63)
        assert message.name == "Sé"
        assert message.is_live is False

    def test_zero_coordinates_are_valid(self) -> None:
        message = classify(
            make_payload({"locationMessage": {"degreesLatitude": 0, "degreesLongitude": 0}})
        )

        assert isinstance(message, LocationMessage)
        assert message.latitude == 0.0

    def test_live_location(self) -> None:
        message = classify(
            make_payload(
                {"liveLocationMessage": {"degreesLatitude": 1.5, "degreesLongitude": 2.5}}
            )
        )

        assert isinstance(message, LocationMessage)
        assert message.is_live is True

    def test_location_without_longitude_is_malformed(self) -> None:
        with pytest.raises(MalformedPayloadError):
            classify(make_payload({"locationMessage": {"degreesLatitude": 1.0}}))

    @pytest.mark.parametrize("latitude", ["norte", {"v": 1}, [1.0]])
    def test_non_numeric_coordinate_is_malformed(self, latitude: object) -> None:
        payload = make_payload(
            {"locationMessage": {"degreesLatitude": latitude, "degreesLongitude": 2.0}}
        )

        with pytest.raises(MalformedPayloadError):
            classify(payload)

    def test_numeric_string_coordinate_is_accepted(self) -> None:
        message = classify(
            make_payload({"locationMessage": {"degreesLatitude": "-23.5", "degreesLongitude": 1}})
        )

        assert isinstance(message, LocationMessage)
        assert message.latitude == -23.5


class TestUnknownAndMalformed:
    def test_unrecognized_field_becomes_unknown(self) -> None:
        message = classify(make_payload({"stickerMessage": {"url": "x"}}))

        assert isinstance(message, UnknownMessage)
        assert message.source_type == "stickerMessage"

    def test_payload_without_message_becomes_unknown(self) -> None:
        message = classify(make_payload(None))

        assert isinstance(message, UnknownMessage)
        assert message.source_type == "unknown"

    def test_missing_key_id_is_malformed(self) -> None:
        payload = make_payload({"conversation": "Oi"})
        del payload["key"]["id"]

        with pytest.raises(MalformedPayloadError):
            classify(payload)

    def test_missing_remote_jid_is_malformed(self) -> None:
        payload = make_payload({"conversation": "Oi"})
        payload["key"]["remoteJid"] = ""

        with pytest.raises(MalformedPayloadError):
            classify(payload)


class TestHelpers:
    def test_group_contact(self) -> None:
        contact = build_contact_info(make_payload({}, remote_jid="12036302@g.us", from_me=True))

        assert contact.is_group is True
        assert contact.is_me is True
        assert contact.number == "12036302"

    def test_video_extension_strips_parameters(self) -> None:
        assert video_extension("video/3gpp; codecs=x") == "3gpp"
        assert video_extension("video") == "bin"

    def test_document_extension_is_case_insensitive(self) -> None:
        assert document_extension("Application/PDF") == "pdf"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1_700_000_000, datetime.fromtimestamp(1_700_000_000, UTC)),
            ("1700000000", datetime.fromtimestamp(1_700_000_000, UTC)),
            ({"low": 1_700_000_000, "high": 0, "unsigned": False}, datetime.fromtimestamp(1_700_000_000, UTC)),
            (None, None),
            ("abc", None),
            (True, None),
        ],
    )
    def test_parse_timestamp(self, value: object, expected: datetime | None) -> None:
        assert parse_timestamp(value) == expected

    def test_event_round_trip_keeps_variant(self) -> None:
        message = classify(make_payload({"videoMessage": {"mimetype": "video/mp4"}}))

        event = to_event(message)
        restored = from_event(event)

        assert event["kind"] == "video"
        assert event["storagePath"] == f"/video/MSG1-{JID}.mp4"
        assert event["contact"]["isGroup"] is False
        assert isinstance(restored, VideoMessage)
        assert restored.storage_path == message.storage_path
