"""Pydantic schemas for user responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.adapters.storage.base import UserRecord

# Accepted on input, never echoed back
WRITE_ONLY_FIELDS = frozenset({"password"})


class UserResponse(BaseModel):
    """A user record in its flat wire shape.

    Caller-supplied attributes appear as extra top-level keys next to the
    store-owned ``id``, ``createdAt`` and ``updatedAt``.
    """

    model_config = ConfigDict(extra="allow")

    id: int = Field(..., description="Store-assigned identifier, never reused.")
    created_at: datetime = Field(
        ...,
        alias="createdAt",
        description="When the user was created (UTC).",
    )
    updated_at: datetime = Field(
        ...,
        alias="updatedAt",
        description="When the user was last modified (UTC).",
    )

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        public = {k: v for k, v in record.fields.items() if k not in WRITE_ONLY_FIELDS}
        return cls(
            id=record.id,
            createdAt=record.created_at,
            updatedAt=record.updated_at,
            **public,
        )
