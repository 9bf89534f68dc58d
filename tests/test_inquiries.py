from __future__ import annotations

import pytest
from fastapi import HTTPException

from conftest import NOW, property_row
from core import notify
from inquiries import service
from inquiries.schemas import InquiryCreateRequest


def _request(**overrides) -> InquiryCreateRequest:
    data = {
        "property_id": 1,
        "sender_name": "Bob",
        "sender_email": "bob@example.com",
        "message": "Is it still available?",
    }
    data.update(overrides)
    return InquiryCreateRequest(**data)


def _listing(owner_email: str | None = "owner@example.com") -> dict:
    return property_row(owner_id=10, owner_name="Owner", owner_email=owner_email, owner_phone=None)


async def test_anonymous_inquiry_is_stored_without_sender(fake_db, monkeypatch):
    sent = []

    async def fake_send(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(notify, "send_email", fake_send)
    fake_db.queue("fetch_one", _listing())
    fake_db.queue("execute_returning", {"id": 31})

    assert await service.create(fake_db, _request(), sender_id=None) == {"id": 31}

    (sql, args), = fake_db.calls_to("execute_returning")
    assert "INSERT INTO inquiries" in sql
    assert args == (1, None, "Bob", "bob@example.com", None, "Is it still available?")
    assert sent[0]["to_email"] == "owner@example.com"
    assert sent[0]["subject"] == "New Inquiry for: Sea view house"


async def test_notification_failure_does_not_fail_inquiry(fake_db, monkeypatch):
    async def failing_send(**kwargs):
        raise notify.NotificationError("provider down")

    monkeypatch.setattr(notify, "send_email", failing_send)
    fake_db.queue("fetch_one", _listing())
    fake_db.queue("execute_returning", {"id": 32})

    assert await service.create(fake_db, _request(), sender_id=10) == {"id": 32}


async def test_owner_without_email_is_not_notified(fake_db, monkeypatch):
    async def unexpected_send(**kwargs):
        raise AssertionError("should not send")

    monkeypatch.setattr(notify, "send_email", unexpected_send)
    fake_db.queue("fetch_one", _listing(owner_email=None))
    fake_db.queue("execute_returning", {"id": 33})

    assert await service.create(fake_db, _request(), sender_id=None) == {"id": 33}


async def test_inquiry_on_missing_property_is_not_found(fake_db):
    with pytest.raises(HTTPException) as exc:
        await service.create(fake_db, _request(), sender_id=None)
    assert exc.value.status_code == 404
    assert fake_db.calls_to("execute_returning") == []


async def test_for_property_requires_ownership(fake_db):
    fake_db.queue("fetch_one", property_row(user_id=99))

    with pytest.raises(HTTPException) as exc:
        await service.for_property(fake_db, 1, user_id=10)
    assert exc.value.status_code == 404


async def test_received_inquiries_carry_property_summary(fake_db):
    fake_db.queue(
        "fetch_all",
        [
            {
                "id": 4,
                "property_id": 1,
                "sender_id": None,
                "sender_name": "Bob",
                "sender_email": "bob@example.com",
                "sender_phone": None,
                "message": "Hi",
                "is_read": False,
                "created_at": NOW,
                "property_title": "Sea view house",
            }
        ],
    )

    items = await service.received(fake_db, user_id=10)

    assert items[0]["property"] == {"id": 1, "title": "Sea view house"}
    (sql, args), = fake_db.calls_to("fetch_all")
    assert "p.user_id = $1" in sql
    assert args == (10,)


async def test_mark_read_on_someone_elses_inquiry_is_not_found(fake_db):
    fake_db.queue("execute_returning", None)

    with pytest.raises(HTTPException) as exc:
        await service.mark_read(fake_db, 4, user_id=10)
    assert exc.value.status_code == 404


async def test_unread_count(fake_db):
    fake_db.queue("fetch_val", 3)

    assert await service.unread_count(fake_db, user_id=10) == {"count": 3}
