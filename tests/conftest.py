"""
Shared fixtures: a recording stand-in for `core.db.Database`, an in-memory
storage backend, and a TestClient wired to both.
"""

from __future__ import annotations

from collections import defaultdict, deque
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core.storage import StorageBackend, StorageError

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

_DEFAULTS = {
    "fetch_one": None,
    "fetch_all": [],
    "fetch_val": None,
    "execute": 1,
    "execute_returning": None,
    "execute_many": None,
}


class FakeDatabase:
    """
    Records every call as (method, sql, args). Results are served from
    per-method queues, falling back to a neutral default.
    """

    available = True

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.transactions = 0
        self._results: dict[str, deque] = defaultdict(deque)

    def queue(self, method: str, *results: Any) -> None:
        self._results[method].extend(results)

    def _serve(self, method: str, sql: str, args: tuple[Any, ...]) -> Any:
        self.calls.append((method, sql, args))
        queued = self._results[method]
        result = queued.popleft() if queued else _DEFAULTS[method]
        if isinstance(result, BaseException):
            raise result
        return result

    def calls_to(self, method: str) -> list[tuple[str, tuple[Any, ...]]]:
        return [(sql, args) for (m, sql, args) in self.calls if m == method]

    async def fetch_one(self, sql: str, *args: Any) -> Any:
        return self._serve("fetch_one", sql, args)

    async def fetch_all(self, sql: str, *args: Any) -> Any:
        return self._serve("fetch_all", sql, args)

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        return self._serve("fetch_val", sql, args)

    async def execute(self, sql: str, *args: Any) -> Any:
        return self._serve("execute", sql, args)

    async def execute_returning(self, sql: str, *args: Any) -> Any:
        return self._serve("execute_returning", sql, args)

    async def execute_many(self, sql: str, records: list[tuple[Any, ...]]) -> Any:
        return self._serve("execute_many", sql, (records,))

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield self

    async def close(self) -> None:
        return None


class MemoryStorage(StorageBackend):
    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.blobs: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_on = fail_on or set()

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        if any(name in key for name in self.fail_on):
            raise StorageError(f"boom {key}")
        self.blobs[key] = data
        return f"https://cdn.test/{key}"

    async def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.blobs.pop(key, None)


def property_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 1,
        "user_id": 10,
        "title": "Sea view house",
        "description": "Three bedrooms close to town.",
        "price": Decimal("250000.00"),
        "property_type": "house",
        "status": "sale",
        "bedrooms": 3,
        "bathrooms": 2,
        "area": Decimal("180.50"),
        "location": "Kukum",
        "address": None,
        "latitude": Decimal("-9.43000000"),
        "longitude": Decimal("159.95000000"),
        "amenities": "Garden",
        "is_active": True,
        "view_count": 4,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def user_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 10,
        "open_id": "ext-10",
        "name": "Alice",
        "email": "alice@example.com",
        "phone": None,
        "password_hash": None,
        "login_method": "google",
        "role": "user",
        "is_immutable": False,
        "created_at": NOW,
        "updated_at": NOW,
        "last_signed_in": NOW,
    }
    row.update(overrides)
    return row


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def client(fake_db: FakeDatabase, storage: MemoryStorage):
    """
    TestClient without the lifespan: handles are injected directly.
    """
    from core.deps import get_db, get_storage
    from main import app

    app.state.db = fake_db
    app.state.storage = storage
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client):
    """
    Make every request come from user 10.
    """
    from auth import dependencies as auth_dependencies
    from main import app

    user = user_row()
    app.dependency_overrides[auth_dependencies.get_current_user] = lambda: user
    app.dependency_overrides[auth_dependencies.get_optional_user] = lambda: user
    return user
