"""
Postgres-backed fixtures. Skipped unless TEST_DATABASE_URL points at a
disposable database: every test drops and recreates the schema.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core import db as core_db

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "db" / "migrations"


def _migration_sections() -> tuple[str, str]:
    up_parts: list[str] = []
    down_parts: list[str] = []
    for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
        text = path.read_text(encoding="utf-8")
        up, _, down = text.partition("-- migrate:down")
        up_parts.append(up.replace("-- migrate:up", ""))
        down_parts.insert(0, down)
    return "\n".join(up_parts), "\n".join(down_parts)


@pytest.fixture
async def pg_db():
    url = os.environ.get("TEST_DATABASE_URL", "").strip()
    if not url:
        pytest.skip("TEST_DATABASE_URL is not set")

    handle = await core_db.connect(url)
    if not handle.available:
        pytest.skip("TEST_DATABASE_URL is not reachable")

    up_sql, down_sql = _migration_sections()
    async with handle.transaction() as tx:
        await tx.execute(down_sql)
        await tx.execute(up_sql)
    try:
        yield handle
    finally:
        await handle.close()


async def create_user(db, *, open_id: str, email: str | None = None, role: str = "user", immutable: bool = False) -> int:
    row = await db.execute_returning(
        """
        INSERT INTO users (open_id, email, role, is_immutable)
        VALUES ($1, $2, $3, $4)
        RETURNING id
        """,
        open_id,
        email,
        role,
        immutable,
    )
    return int(row["id"])
