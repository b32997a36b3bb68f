"""User service: validation and storage orchestration.

The service is the only caller of the store from the API layer. It runs the
validation gate on every field map before the store sees it, so a rejected
payload never causes a mutation, and it logs each outcome with the user id
only (field values may contain personal data).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from app.adapters.storage.base import AbstractUserStore, UserRecord
from app.core.errors import NotFoundAppError
from app.utils.validators import validate_user_fields

logger = logging.getLogger(__name__)


class UserService:
    """CRUD operations over an injected user store."""

    def __init__(self, store: AbstractUserStore) -> None:
        self._store = store

    @property
    def store(self) -> AbstractUserStore:
        return self._store

    def list_users(self) -> list[UserRecord]:
        return self._store.list()

    def create_user(self, fields: Mapping[str, Any]) -> UserRecord:
        """Validate ``fields`` and store a new user.

        Raises:
            ValidationAppError: If a known field has an invalid shape.
        """
        validate_user_fields(fields)
        record = self._store.create(fields)
        logger.info(
            "user.created",
            extra={"user_id": record.id, "field_names": sorted(record.fields)},
        )
        return record

    def get_user(self, user_id: int) -> UserRecord:
        """Return the user or raise NotFoundAppError."""
        return self._store.get_by_id(user_id)

    def find_user(self, user_id: int) -> UserRecord | None:
        """Return the user, or None when it does not exist."""
        try:
            return self._store.get_by_id(user_id)
        except NotFoundAppError:
            return None

    def update_user(self, user_id: int, fields: Mapping[str, Any]) -> UserRecord:
        """Validate ``fields`` and merge them over an existing user.

        Raises:
            ValidationAppError: If a known field has an invalid shape.
            NotFoundAppError: If the user does not exist.
        """
        validate_user_fields(fields)
        try:
            record = self._store.update(user_id, fields)
        except NotFoundAppError:
            logger.info("user.update_missing", extra={"user_id": user_id})
            raise
        logger.info(
            "user.updated",
            extra={"user_id": record.id, "field_names": sorted(fields)},
        )
        return record

    def delete_user(self, user_id: int) -> None:
        """Remove a user.

        Raises:
            NotFoundAppError: If the user does not exist.
        """
        try:
            self._store.delete(user_id)
        except NotFoundAppError:
            logger.info("user.delete_missing", extra={"user_id": user_id})
            raise
        logger.info("user.deleted", extra={"user_id": user_id})
