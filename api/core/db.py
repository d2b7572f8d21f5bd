"""
Async database access (raw SQL) using asyncpg.

The service talks to Postgres through ONE connection for the life of the
process. asyncpg connections do not allow overlapping operations, so every
caller goes through `Database.session()`, which serializes access with an
asyncio.Lock. FastAPI opens the connection on startup and closes it on
shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)


# Driver failures are explicit and separable from other runtime errors.
class DatabaseError(RuntimeError):
    pass


_DRIVER_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def rows_affected(status: str) -> int:
    """
    Row count from an asyncpg command tag, e.g. "UPDATE 1" -> 1, "DELETE 0" -> 0.
    """
    tail = (status or "").rsplit(" ", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


class Database:
    """
    A single shared connection guarded by a lock.

    There is no reconnection: if the backend drops the connection, every
    later operation fails with DatabaseError until the process restarts.
    """

    def __init__(self, dsn: str, *, command_timeout: float | None = None) -> None:
        self._dsn = dsn
        self._command_timeout = command_timeout
        self._conn: asyncpg.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.is_closed()

    async def connect(self) -> None:
        if self._conn is not None:
            return None
        conn = await asyncpg.connect(dsn=self._dsn, command_timeout=self._command_timeout)
        conn.add_termination_listener(self._on_terminated)
        self._conn = conn
        logger.info("database_connected")

    async def close(self) -> None:
        if self._conn is None:
            return None
        conn, self._conn = self._conn, None
        await conn.close()
        logger.info("database_closed")

    def connection(self) -> asyncpg.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not connected. Call connect() on startup.")
        return self._conn

    @asynccontextmanager
    async def session(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Exclusive access to the connection for the duration of the block.

        Blocks until any previous holder leaves its block. The lock is
        released on every exit path; driver errors raised inside the block
        come out as DatabaseError.
        """
        conn = self.connection()
        async with self._lock:
            try:
                yield conn
            except _DRIVER_ERRORS as exc:
                raise DatabaseError(str(exc) or exc.__class__.__name__) from exc

    def _on_terminated(self, _conn: asyncpg.Connection) -> None:
        logger.error("database_connection_lost dsn_host=%s", urlsplit(self._dsn).hostname)
