"""
PostgreSQL access through one process-wide asyncpg pool.

`main.lifespan` opens the pool from `Settings` and closes it on shutdown.
Repositories talk to it only through the helpers below; every row comes back
as a plain dict so services never see `asyncpg.Record`.

Queries use asyncpg's positional placeholders ($1, $2, ...).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .settings import Settings

logger = logging.getLogger(__name__)

# libpq-only query parameters that asyncpg rejects in a DSN.
_LIBPQ_ONLY_PARAMS = {"sslmode", "schema"}

_pool: asyncpg.Pool | None = None


def asyncpg_dsn(url: str) -> str:
    """Strip libpq-only query parameters (hosted Postgres URLs often carry them)."""
    url = url.strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")

    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k not in _LIBPQ_ONLY_PARAMS]
    return urlunsplit(parts._replace(query=urlencode(kept)))


async def init_pool(settings: Settings) -> None:
    global _pool
    if _pool is not None:
        return
    _pool = await asyncpg.create_pool(
        dsn=asyncpg_dsn(settings.database_url),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=30,
    )
    logger.info(
        "db_pool_opened min_size=%s max_size=%s",
        settings.db_pool_min_size,
        settings.db_pool_max_size,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return
    pool_, _pool = _pool, None
    await pool_.close()


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized; init_pool() runs in the app lifespan.")
    return _pool


def rows_to_dicts(rows: Iterable[asyncpg.Record]) -> list[dict[str, Any]]:
    return [dict(r) for r in rows]


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    return rows_to_dicts(await pool().fetch(sql, *args))


async def execute(sql: str, *args: Any) -> str:
    """Run a statement and return its status tag, e.g. "DELETE 1"."""
    return await pool().execute(sql, *args)


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Hold one pooled connection for the duration of the block, inside a
    transaction. Leaving the block with an exception rolls it back.
    """
    async with pool().acquire() as conn:
        async with conn.transaction():
            yield conn
