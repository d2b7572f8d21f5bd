"""
Dependencies for the user routes.
"""

from __future__ import annotations

from fastapi import Request

from core.db import Database


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not configured on app.state.")
    return database
