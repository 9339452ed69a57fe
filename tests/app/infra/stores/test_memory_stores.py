"""Testes dos stores em memória."""

from __future__ import annotations

import pytest

from app.domain.contact import ContactRecord
from app.domain.credentials import Credentials
from app.infra.stores.memory_stores import (
    MemoryCredentialStore,
    MemoryObjectStorage,
    MemoryRecordStore,
)


class TestMemoryCredentialStore:
    """Testes do MemoryCredentialStore."""

    @pytest.mark.asyncio
    async def test_save_load_delete(self) -> None:
        """Deve salvar cópia independente e esvaziar no delete."""
        store = MemoryCredentialStore()
        credentials = Credentials(data={"registered": True})

        await store.save(credentials)
        credentials.data["registered"] = False
        loaded = await store.load()

        assert loaded.is_registered
        await store.delete()
        assert (await store.load()).is_empty
        assert store.delete_count == 1


class TestMemoryRecordStore:
    @pytest.mark.asyncio
    async def test_find_or_create_contact(self) -> None:
        store = MemoryRecordStore()
        assert await store.find_contact_by_external_id("a@s.whatsapp.net") is None

        created = await store.create_contact(ContactRecord(whatsapp_contact_id="a@s.whatsapp.net"))
        found = await store.find_contact_by_external_id("a@s.whatsapp.net")

        assert created.id
        assert found == created

    @pytest.mark.asyncio
    async def test_create_message(self) -> None:
        store = MemoryRecordStore()

        message_id = await store.create_message({"type": "text"})

        assert store.messages[message_id] == {"type": "text"}


class TestMemoryObjectStorage:
    @pytest.mark.asyncio
    async def test_put_returns_key(self) -> None:
        storage = MemoryObjectStorage()
        await storage.ensure_bucket("media")

        key = await storage.put("media", "/image/a.jpg", b"x", "image/jpeg")

        assert key == "/image/a.jpg"
        assert storage.buckets["media"][key] == (b"x", "image/jpeg")
