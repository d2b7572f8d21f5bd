from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core import db
from main import create_app


class FakeConnection:
    """In-memory stand-in for an asyncpg connection holding the users table.

    Understands exactly the statements the users repository issues. Tracks
    how many operations overlap so tests can check the session lock.
    """

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.next_id = 1
        self.statements: list[str] = []
        self.fail_with: Exception | None = None
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self.connect_kwargs: dict[str, Any] = {}
        self.termination_listeners: list = []

    # asyncpg.Connection surface

    def add_termination_listener(self, callback) -> None:
        self.termination_listeners.append(callback)

    def is_closed(self) -> bool:
        return self.closed

    async def close(self) -> None:
        self.closed = True

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return await self._run(sql, args)

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        return await self._run(sql, args)

    async def execute(self, sql: str, *args: Any) -> str:
        return await self._run(sql, args)

    # helpers

    def terminate(self) -> None:
        self.closed = True
        for callback in self.termination_listeners:
            callback(self)

    async def _run(self, sql: str, args: tuple) -> Any:
        if self.closed:
            raise db.asyncpg.InterfaceError("connection is closed")
        if self.fail_with is not None:
            raise self.fail_with

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Give other tasks a chance to interleave.
            await asyncio.sleep(0)
            statement = " ".join(sql.split())
            self.statements.append(statement)
            return self._dispatch(statement, args)
        finally:
            self.in_flight -= 1

    def _dispatch(self, statement: str, args: tuple) -> Any:
        if statement.startswith("CREATE TABLE IF NOT EXISTS users"):
            return "CREATE TABLE"
        if statement == "SELECT * FROM users":
            return [dict(row) for row in self.rows.values()]
        if statement == "SELECT * FROM users WHERE id = $1":
            row = self.rows.get(args[0])
            return dict(row) if row is not None else None
        if statement.startswith("INSERT INTO users (name, email)"):
            user_id = self.next_id
            self.next_id += 1
            self.rows[user_id] = {"id": user_id, "name": args[0], "email": args[1]}
            return {"id": user_id}
        if statement.startswith("UPDATE users SET name = $1, email = $2 WHERE id = $3"):
            name, email, user_id = args
            if user_id not in self.rows:
                return "UPDATE 0"
            self.rows[user_id].update(name=name, email=email)
            return "UPDATE 1"
        if statement == "DELETE FROM users WHERE id = $1":
            removed = self.rows.pop(args[0], None)
            return f"DELETE {0 if removed is None else 1}"
        raise AssertionError(f"unexpected statement: {statement}")


@pytest.fixture()
def fake_conn(monkeypatch) -> FakeConnection:
    conn = FakeConnection()

    async def _connect(*args: Any, **kwargs: Any) -> FakeConnection:
        conn.connect_kwargs = kwargs
        return conn

    monkeypatch.setattr(db.asyncpg, "connect", _connect)
    monkeypatch.setenv("DATABASE_URL", "postgresql://app:secret@db:5432/app?sslmode=disable")
    monkeypatch.delenv("DB_COMMAND_TIMEOUT_S", raising=False)
    return conn


@pytest.fixture()
def app(fake_conn: FakeConnection):
    return create_app()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def created_user(client: TestClient) -> dict:
    r = client.post("/users", json={"name": "Ann", "email": "ann@x.com"})
    assert r.status_code == 201, r.text
    return r.json()
