"""
User business logic: id parsing, one statement per operation, and mapping
database outcomes to HTTP statuses.

Malformed path ids are answered with 500, not 400.
"""

from __future__ import annotations

import logging
import re

from fastapi import HTTPException, status

from core import db

from . import repository, schemas

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"[+-]?0*[0-9]{1,10}")

# users.id is SERIAL (int4).
MIN_USER_ID = -(2**31)
MAX_USER_ID = 2**31 - 1


class UserNotFound(LookupError):
    pass


def parse_user_id(raw: str) -> int:
    """
    Parse a path segment as a user id.

    Accepts an optional sign and ASCII digits within the int4 range. Overlong
    digit runs are rejected before conversion.
    """
    if _ID_PATTERN.fullmatch(raw or "") is not None:
        value = int(raw)
        if MIN_USER_ID <= value <= MAX_USER_ID:
            return value

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Can't parse {raw} as an id",
    )


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


async def list_users(database: db.Database) -> list[schemas.User]:
    logger.info("users_list")
    try:
        async with database.session() as conn:
            rows = await repository.list_users(conn)
    except db.DatabaseError as exc:
        logger.error("users_list_failed error=%s", exc)
        raise _server_error("Failed to retrieve users") from exc

    return [schemas.User.from_row(row) for row in rows]


async def create_user(database: db.Database, payload: schemas.UserPayload) -> schemas.User:
    logger.info("user_create")
    try:
        async with database.session() as conn:
            user_id = await repository.insert_user(conn, name=payload.name, email=payload.email)
    except db.DatabaseError as exc:
        logger.error("user_create_failed error=%s", exc)
        raise _server_error("Failed to insert into DB") from exc

    logger.info("user_created user_id=%s", user_id)
    return schemas.User(id=user_id, name=payload.name, email=payload.email)


async def get_user(database: db.Database, raw_id: str) -> schemas.User:
    user_id = parse_user_id(raw_id)
    logger.info("user_get user_id=%s", user_id)
    try:
        async with database.session() as conn:
            row = await repository.get_user(conn, user_id)
    except db.DatabaseError as exc:
        logger.error("user_get_failed user_id=%s error=%s", user_id, exc)
        raise _server_error(f"Failed to retrieve user {user_id}") from exc

    if row is None:
        logger.info("user_not_found user_id=%s", user_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
    return schemas.User.from_row(row)


async def update_user(
    database: db.Database,
    raw_id: str,
    payload: schemas.UserPayload,
) -> schemas.User:
    """
    Overwrite name and email of an existing user.

    Raises UserNotFound when no row matched; the router answers that with a
    bare 404.
    """
    user_id = parse_user_id(raw_id)
    logger.info("user_update user_id=%s", user_id)
    try:
        async with database.session() as conn:
            updated = await repository.update_user(
                conn,
                user_id,
                name=payload.name,
                email=payload.email,
            )
    except db.DatabaseError as exc:
        logger.error("user_update_failed user_id=%s error=%s", user_id, exc)
        raise _server_error(f"Failed to update user {user_id}") from exc

    if updated == 0:
        logger.info("user_not_found user_id=%s", user_id)
        raise UserNotFound(user_id)
    return schemas.User(id=user_id, name=payload.name, email=payload.email)


async def delete_user(database: db.Database, raw_id: str) -> None:
    user_id = parse_user_id(raw_id)
    logger.info("user_delete user_id=%s", user_id)
    try:
        async with database.session() as conn:
            deleted = await repository.delete_user(conn, user_id)
    except db.DatabaseError as exc:
        logger.error("user_delete_failed user_id=%s error=%s", user_id, exc)
        raise _server_error("SQL query failed") from exc

    if deleted == 0:
        logger.info("user_not_found user_id=%s", user_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
