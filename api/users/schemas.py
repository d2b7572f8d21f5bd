"""
User API schemas (request/response models).
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field


class UserPayload(BaseModel):
    # Server assigns ids; a client-supplied one is ignored.
    id: int | None = None
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)


class User(BaseModel):
    id: int | None = None
    name: str
    email: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(id=int(row["id"]), name=str(row["name"]), email=str(row["email"]))
