from __future__ import annotations

import pytest

from core import db
from core.storage import LocalFileStorage, StorageError, property_image_key


def test_affected_rows_reads_command_tag():
    assert db._affected_rows("UPDATE 3") == 3
    assert db._affected_rows("INSERT 0 1") == 1
    assert db._affected_rows("") == 0


def test_sslmode_is_stripped_from_dsn():
    url = "postgresql://u:p@host:5432/app?sslmode=require&application_name=api"

    assert db._sanitize_database_url(url) == "postgresql://u:p@host:5432/app?application_name=api"


async def test_missing_dsn_gives_unavailable_handle(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    handle = await db.connect()

    assert handle.available is False


async def test_unavailable_reads_are_empty_and_writes_raise():
    handle = db.UnavailableDatabase()

    assert await handle.fetch_one("SELECT 1") is None
    assert await handle.fetch_all("SELECT 1") == []
    assert await handle.fetch_val("SELECT 1") is None
    with pytest.raises(db.DatabaseUnavailableError):
        await handle.execute("DELETE FROM favorites")
    with pytest.raises(db.DatabaseUnavailableError):
        async with handle.transaction():
            pass


def test_image_key_is_namespaced_and_safe():
    key = property_image_key(42, "../../My Photo (1).JPG")

    prefix, name = key.rsplit("/", 1)
    assert prefix == "properties/42"
    assert name.endswith("-My-Photo-1-.JPG")
    assert ".." not in key


async def test_local_storage_writes_and_deletes(tmp_path):
    backend = LocalFileStorage(base_dir=str(tmp_path), base_url="http://api.test/")

    url = await backend.put("properties/1/abc-a.jpg", b"data", "image/jpeg")

    assert url == "http://api.test/uploads/properties/1/abc-a.jpg"
    assert (tmp_path / "properties/1/abc-a.jpg").read_bytes() == b"data"
    await backend.delete("properties/1/abc-a.jpg")
    assert not (tmp_path / "properties/1/abc-a.jpg").exists()


async def test_local_storage_refuses_escaping_keys(tmp_path):
    backend = LocalFileStorage(base_dir=str(tmp_path))

    with pytest.raises(StorageError):
        await backend.put("../outside.jpg", b"x", "image/jpeg")


async def test_email_is_skipped_without_api_key(monkeypatch):
    from core import notify

    monkeypatch.delenv("NOTIFY_API_KEY", raising=False)

    assert await notify.send_email(to_email="owner@example.com", subject="s", text="t") is False
