from __future__ import annotations

import base64

import pytest
from fastapi import HTTPException

from conftest import property_row
from images import repository, service
from images.schemas import ImageUpload, ImageUploadRequest


def _upload(name: str = "front.jpg", data: bytes = b"jpeg-bytes", mime_type: str = "image/jpeg") -> ImageUpload:
    return ImageUpload(base64=base64.b64encode(data).decode(), filename=name, mime_type=mime_type)


def test_decode_accepts_data_url_prefix():
    raw = "data:image/png;base64," + base64.b64encode(b"png").decode()

    decoded = service.decode_images([ImageUpload(base64=raw, filename="a.png", mime_type="IMAGE/PNG")])

    assert decoded[0].data == b"png"
    assert decoded[0].mime_type == "image/png"


def test_decode_rejects_unsupported_type():
    with pytest.raises(HTTPException) as exc:
        service.decode_images([_upload(mime_type="application/pdf")])
    assert exc.value.status_code == 400


def test_decode_rejects_invalid_base64():
    with pytest.raises(HTTPException) as exc:
        service.decode_images([ImageUpload(base64="not base64!!", filename="x.jpg", mime_type="image/jpeg")])
    assert exc.value.status_code == 400
    assert "x.jpg" in exc.value.detail


def test_decode_rejects_oversized_image(monkeypatch):
    monkeypatch.setenv("MAX_IMAGE_BYTES", "4")

    with pytest.raises(HTTPException) as exc:
        service.decode_images([_upload(data=b"12345")])
    assert exc.value.status_code == 413


async def test_upload_images_keeps_input_order(storage):
    decoded = service.decode_images([_upload("a.jpg"), _upload("b.jpg"), _upload("c.jpg")])

    records = await service.upload_images(storage, 7, decoded, start_order=0, first_is_primary=True)

    assert [r["sort_order"] for r in records] == [0, 1, 2]
    assert [r["is_primary"] for r in records] == [True, False, False]
    assert [r["file_key"].rsplit("-", 1)[-1] for r in records] == ["a.jpg", "b.jpg", "c.jpg"]
    assert all(r["file_key"].startswith("properties/7/") for r in records)
    assert all(r["url"] == f"https://cdn.test/{r['file_key']}" for r in records)


async def test_upload_images_appends_after_existing(storage):
    decoded = service.decode_images([_upload("d.jpg")])

    records = await service.upload_images(storage, 7, decoded, start_order=3, first_is_primary=False)

    assert records[0]["sort_order"] == 3
    assert records[0]["is_primary"] is False


async def test_failed_put_discards_stored_blobs(storage):
    storage.fail_on = {"bad.jpg"}
    decoded = service.decode_images([_upload("ok.jpg"), _upload("bad.jpg")])

    with pytest.raises(HTTPException) as exc:
        await service.upload_images(storage, 7, decoded)

    assert exc.value.status_code == 500
    assert storage.blobs == {}
    assert len(storage.deleted) == 1 and storage.deleted[0].endswith("ok.jpg")


async def test_upload_rejects_foreign_property(fake_db, storage):
    fake_db.queue("fetch_one", property_row(user_id=99))

    with pytest.raises(HTTPException) as exc:
        await service.upload(fake_db, storage, 1, ImageUploadRequest(images=[_upload()]), user_id=10)

    assert exc.value.status_code == 404
    assert storage.blobs == {}
    assert fake_db.calls_to("execute_many") == []


async def test_upload_to_listing_without_images_sets_primary(fake_db, storage):
    fake_db.queue("fetch_one", property_row())
    fake_db.queue("fetch_val", 0)

    result = await service.upload(fake_db, storage, 1, ImageUploadRequest(images=[_upload(), _upload()]), user_id=10)

    assert result == {"success": True, "count": 2}
    (_, (records,)), = fake_db.calls_to("execute_many")
    assert [(r[3], r[4]) for r in records] == [(True, 0), (False, 1)]


async def test_delete_removes_row_then_blob(fake_db, storage):
    fake_db.queue("fetch_one", property_row())
    fake_db.queue("execute_returning", {"id": 3, "file_key": "properties/1/x-a.jpg"})

    assert await service.delete(fake_db, storage, 1, 3, user_id=10) == {"success": True}
    assert storage.deleted == ["properties/1/x-a.jpg"]


async def test_delete_unknown_image_is_not_found(fake_db, storage):
    fake_db.queue("fetch_one", property_row())
    fake_db.queue("execute_returning", None)

    with pytest.raises(HTTPException) as exc:
        await service.delete(fake_db, storage, 1, 3, user_id=10)

    assert exc.value.status_code == 404
    assert storage.deleted == []


async def test_set_primary_is_a_single_scoped_update(fake_db):
    fake_db.queue("execute", 3)

    assert await repository.set_primary_image(fake_db, 5, property_id=1) is True
    (sql, args), = fake_db.calls_to("execute")
    assert "SET is_primary = (id = $1)" in sql
    assert "EXISTS" in sql
    assert args == (5, 1)


async def test_set_primary_on_foreign_image_is_not_found(fake_db):
    fake_db.queue("fetch_one", property_row())
    fake_db.queue("execute", 0)

    with pytest.raises(HTTPException) as exc:
        await service.set_primary(fake_db, 1, 99, user_id=10)
    assert exc.value.status_code == 404


async def test_delete_on_someone_elses_listing_is_not_found(fake_db, storage):
    fake_db.queue("fetch_one", property_row(user_id=99))

    with pytest.raises(HTTPException) as exc:
        await service.delete(fake_db, storage, 1, 3, user_id=10)

    assert exc.value.status_code == 404
    assert exc.value.detail == "Property not found."
    assert fake_db.calls_to("execute") == []
    assert fake_db.calls_to("execute_returning") == []
    assert storage.deleted == []


async def test_set_primary_on_someone_elses_listing_is_not_found(fake_db):
    fake_db.queue("fetch_one", property_row(user_id=99))

    with pytest.raises(HTTPException) as exc:
        await service.set_primary(fake_db, 1, 3, user_id=10)

    assert exc.value.status_code == 404
    assert exc.value.detail == "Property not found."
    assert fake_db.calls_to("execute") == []
    assert fake_db.calls_to("execute_returning") == []
