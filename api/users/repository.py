"""
User persistence (raw SQL).

Every function takes a connection obtained from `Database.session()`; the
caller owns the lock for the duration of the statement.
"""

from __future__ import annotations

import asyncpg

from core import db

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL
)
"""


async def create_table(conn: asyncpg.Connection) -> None:
    await conn.execute(CREATE_TABLE_SQL)


async def list_users(conn: asyncpg.Connection) -> list[dict]:
    rows = await conn.fetch("SELECT * FROM users")
    return [dict(r) for r in rows]


async def insert_user(conn: asyncpg.Connection, *, name: str, email: str) -> int:
    row = await conn.fetchrow(
        """
        INSERT INTO users (name, email)
        VALUES ($1, $2)
        RETURNING id
        """,
        name,
        email,
    )
    if row is None:
        raise asyncpg.InterfaceError("INSERT returned no id.")
    return int(row["id"])


async def get_user(conn: asyncpg.Connection, user_id: int) -> dict | None:
    row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
    return dict(row) if row is not None else None


async def update_user(conn: asyncpg.Connection, user_id: int, *, name: str, email: str) -> int:
    status = await conn.execute(
        """
        UPDATE users
        SET name = $1, email = $2
        WHERE id = $3
        """,
        name,
        email,
        user_id,
    )
    return db.rows_affected(status)


async def delete_user(conn: asyncpg.Connection, user_id: int) -> int:
    status = await conn.execute("DELETE FROM users WHERE id = $1", user_id)
    return db.rows_affected(status)
