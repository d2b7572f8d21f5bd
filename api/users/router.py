"""
User CRUD endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from core.db import Database

from . import schemas, service
from .dependencies import get_database

router = APIRouter()


@router.get("/users")
async def list_users(database: Database = Depends(get_database)) -> list[schemas.User]:
    return await service.list_users(database)


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: schemas.UserPayload,
    database: Database = Depends(get_database),
) -> schemas.User:
    return await service.create_user(database, payload)


@router.get("/users/{user_id}")
async def get_user(user_id: str, database: Database = Depends(get_database)) -> schemas.User:
    return await service.get_user(database, user_id)


@router.put("/users/{user_id}", response_model=schemas.User)
async def update_user(
    user_id: str,
    payload: schemas.UserPayload,
    database: Database = Depends(get_database),
):
    try:
        return await service.update_user(database, user_id, payload)
    except service.UserNotFound:
        # No row matched: 404 without a body.
        return Response(status_code=status.HTTP_404_NOT_FOUND)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, database: Database = Depends(get_database)) -> Response:
    await service.delete_user(database, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
