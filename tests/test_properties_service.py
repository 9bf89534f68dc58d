from __future__ import annotations

import base64
from decimal import Decimal

import pytest
from fastapi import HTTPException

from conftest import property_row
from images.schemas import ImageUpload
from properties import service
from properties.schemas import PropertyCreateRequest, PropertyUpdateRequest


def _create_request(image_names: list[str] | None = None) -> PropertyCreateRequest:
    images = None
    if image_names is not None:
        images = [
            ImageUpload(base64=base64.b64encode(name.encode()).decode(), filename=name, mime_type="image/jpeg")
            for name in image_names
        ]
    return PropertyCreateRequest(
        title=" Sea view house ",
        price=Decimal("250000"),
        property_type="house",
        status="sale",
        location="Kukum",
        latitude=Decimal("-9.4312345678912"),
        images=images,
    )


async def test_create_with_images_flags_first_primary_in_array_order(fake_db, storage):
    fake_db.queue("execute_returning", {"id": 42})

    result = await service.create(fake_db, storage, _create_request(["a.jpg", "b.jpg", "c.jpg"]), user_id=10)

    assert result == {"success": True, "property_id": 42}
    assert fake_db.transactions == 1
    (_, (records,)), = fake_db.calls_to("execute_many")
    assert [r[0] for r in records] == [42, 42, 42]
    assert [(r[3], r[4]) for r in records] == [(True, 0), (False, 1), (False, 2)]
    assert [r[2].rsplit("-", 1)[-1] for r in records] == ["a.jpg", "b.jpg", "c.jpg"]


async def test_create_normalizes_title_and_coordinates(fake_db, storage):
    fake_db.queue("execute_returning", {"id": 1})

    await service.create(fake_db, storage, _create_request(), user_id=10)

    (sql, args), = fake_db.calls_to("execute_returning")
    assert "Sea view house" in args
    assert Decimal("-9.43123457") in args
    assert fake_db.calls_to("execute_many") == []


async def test_create_discards_blobs_when_image_rows_fail(fake_db, storage):
    fake_db.queue("execute_returning", {"id": 42})
    fake_db.queue("execute_many", RuntimeError("insert failed"))

    with pytest.raises(RuntimeError):
        await service.create(fake_db, storage, _create_request(["a.jpg", "b.jpg"]), user_id=10)

    assert storage.blobs == {}
    assert len(storage.deleted) == 2


async def test_create_rejects_bad_image_before_any_write(fake_db, storage):
    request = _create_request(["a.jpg"])
    request.images[0].mime_type = "text/plain"

    with pytest.raises(HTTPException) as exc:
        await service.create(fake_db, storage, request, user_id=10)

    assert exc.value.status_code == 400
    assert fake_db.calls == []


async def test_update_foreign_listing_is_not_found_and_writes_nothing(fake_db):
    fake_db.queue("fetch_one", property_row(user_id=99))

    with pytest.raises(HTTPException) as exc:
        await service.update(fake_db, 1, PropertyUpdateRequest(title="Mine now"), user_id=10)

    assert exc.value.status_code == 404
    assert fake_db.calls_to("execute") == []


async def test_update_ignores_null_for_required_columns(fake_db):
    fake_db.queue("fetch_one", property_row())

    payload = PropertyUpdateRequest.model_validate({"title": None, "description": None, "bedrooms": 4})
    await service.update(fake_db, 1, payload, user_id=10)

    (sql, args), = fake_db.calls_to("execute")
    assert "title" not in sql
    assert args == (1, 10, None, 4)


async def test_get_counts_one_view_and_attaches_owner(fake_db):
    row = property_row(owner_id=10, owner_name="Alice", owner_email="alice@example.com", owner_phone=None)
    fake_db.queue("fetch_one", row)

    result = await service.get(fake_db, 1)

    assert result["view_count"] == 5
    assert result["owner"] == {"id": 10, "name": "Alice", "email": "alice@example.com", "phone": None}
    assert result["price"] == "250000.00"
    (sql, args), = fake_db.calls_to("execute")
    assert "view_count = view_count + 1" in sql
    assert args == (1,)


async def test_get_missing_listing_is_not_found(fake_db):
    with pytest.raises(HTTPException) as exc:
        await service.get(fake_db, 404)
    assert exc.value.status_code == 404
    assert fake_db.calls_to("execute") == []


async def test_deactivate_foreign_listing_is_not_found(fake_db):
    fake_db.queue("fetch_one", property_row(user_id=99))

    with pytest.raises(HTTPException):
        await service.set_active(fake_db, 1, user_id=10, is_active=False)
    assert fake_db.calls_to("execute") == []


async def test_search_groups_images_per_listing(fake_db):
    fake_db.queue("fetch_all", [property_row(id=1), property_row(id=2)])
    fake_db.queue("fetch_val", 2)
    fake_db.queue(
        "fetch_all",
        [
            {"id": 9, "property_id": 2, "url": "u", "file_key": "k", "is_primary": True, "sort_order": 0, "created_at": property_row()["created_at"]},
        ],
    )

    from properties.repository import SearchFilters

    result = await service.search(fake_db, SearchFilters(), limit=20, offset=0)

    assert result["total"] == 2
    assert [len(p["images"]) for p in result["properties"]] == [0, 1]
