"""
Async database access helpers (raw SQL) using asyncpg.

The connection handle is built once in the FastAPI lifespan (see
`api/main.py`) and handed to request handlers through `core.deps.get_db`.
Repositories take the handle as their first argument.

Two variants exist:
- `Database`: wraps an asyncpg pool (or a single connection inside a
  transaction).
- `UnavailableDatabase`: used when no DATABASE_URL is configured or the pool
  could not be created. Reads come back empty, writes raise
  `DatabaseUnavailableError`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    pass


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = config.env_str("DATABASE_URL")
    if not url:
        return ""
    return _sanitize_database_url(url)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _affected_rows(status: str) -> int:
    # asyncpg returns command tags like "UPDATE 3", "DELETE 0", "INSERT 0 1".
    try:
        return int((status or "").rsplit(" ", 1)[-1])
    except ValueError:
        return 0


class Database:
    available = True

    def __init__(self, executor: asyncpg.Pool | asyncpg.Connection) -> None:
        self._executor = executor

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await self._executor.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self._executor.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        return await self._executor.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> int:
        """
        Run a statement (INSERT/UPDATE/DELETE). Returns the affected row count.
        """
        status = await self._executor.execute(sql, *args)
        return _affected_rows(status)

    async def execute_returning(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a write with a RETURNING clause and return the first row.
        """
        row = await self._executor.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def execute_many(self, sql: str, records: list[tuple[Any, ...]]) -> None:
        if not records:
            return None
        await self._executor.executemany(sql, records)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Database]:
        """
        Yield a handle bound to one connection inside a transaction.

        Nested calls reuse the outer connection and open a savepoint.
        """
        if isinstance(self._executor, asyncpg.Pool):
            async with self._executor.acquire() as conn:  # type: asyncpg.Connection
                async with conn.transaction():
                    yield Database(conn)
            return

        async with self._executor.transaction():
            yield self

    async def close(self) -> None:
        if isinstance(self._executor, asyncpg.Pool):
            await self._executor.close()


class UnavailableDatabase:
    available = False

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        return None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return []

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        return None

    async def execute(self, sql: str, *args: Any) -> int:
        raise DatabaseUnavailableError("Database not available.")

    async def execute_returning(self, sql: str, *args: Any) -> dict[str, Any] | None:
        raise DatabaseUnavailableError("Database not available.")

    async def execute_many(self, sql: str, records: list[tuple[Any, ...]]) -> None:
        raise DatabaseUnavailableError("Database not available.")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[UnavailableDatabase]:
        raise DatabaseUnavailableError("Database not available.")
        yield self  # pragma: no cover

    async def close(self) -> None:
        return None


DatabaseHandle = Database | UnavailableDatabase


async def connect(url: str | None = None) -> DatabaseHandle:
    """
    Create the pool, or fall back to the unavailable handle.
    """
    dsn = database_url() if url is None else _sanitize_database_url(url)
    if not dsn:
        logger.warning("database_unavailable reason=DATABASE_URL_not_set")
        return UnavailableDatabase()

    try:
        pool = await asyncpg.create_pool(
            dsn=dsn,
            min_size=config.env_int("DB_POOL_MIN_SIZE", 1),
            max_size=config.env_int("DB_POOL_MAX_SIZE", 5),
            command_timeout=config.env_int("DB_COMMAND_TIMEOUT_S", 30),
        )
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
        logger.warning("database_unavailable reason=connect_failed error=%s", exc)
        return UnavailableDatabase()

    return Database(pool)
