"""
Async PostgreSQL access (raw SQL, asyncpg).

The pool is opened by the FastAPI lifespan (see `api/main.py`) and is the
only state shared between requests. Placeholders are positional: $1, $2, ...

Driver and connection failures leave this module as `StoreFailure` with the
driver's message; repositories and handlers never see asyncpg exceptions.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import StoreFailure

_pool: asyncpg.Pool | None = None

_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    # asyncpg handles TLS through its own `ssl` argument, not `sslmode`.
    parts = urlsplit(url)
    query = urlencode([(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"])
    return urlunsplit(parts._replace(query=query))


async def init_pool() -> None:
    global _pool
    if _pool is None:
        _pool = await asyncpg.create_pool(dsn=database_url(), min_size=1, max_size=10, command_timeout=30)


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise StoreFailure("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except _STORE_ERRORS as exc:
        raise StoreFailure(str(exc)) from exc


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return its first row as a dict, or None.
    """
    with _store_errors():
        row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    with _store_errors():
        rows = await pool().fetch(sql, *args)
    return [dict(r) for r in rows]
