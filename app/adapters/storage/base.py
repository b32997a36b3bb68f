"""User store interface and record type.

Services depend on AbstractUserStore so the in-memory implementation can be
replaced without changes to the service or API layers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

# Keys owned by the store; callers cannot set them through ``fields``
RESERVED_FIELDS = frozenset({"id", "createdAt", "updatedAt", "created_at", "updated_at"})


@dataclass(frozen=True)
class UserRecord:
    """Immutable snapshot of a stored user.

    Attributes:
        id: Store-assigned identifier, never reused.
        fields: Caller-supplied attributes (name, email, ...).
        created_at: Set once at creation.
        updated_at: Refreshed on every update.
    """

    id: int
    created_at: datetime
    updated_at: datetime
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mapping so a returned record cannot alter the store.
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


class AbstractUserStore(ABC):
    """Interface for user record storage."""

    @abstractmethod
    def list(self) -> list[UserRecord]:
        """Return all records in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def create(self, fields: Mapping[str, Any]) -> UserRecord:
        """Store a new record with a fresh id and return it."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, user_id: int) -> UserRecord:
        """Return the record for ``user_id``.

        Raises:
            NotFoundAppError: If no such record exists.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, user_id: int, fields: Mapping[str, Any]) -> UserRecord:
        """Merge ``fields`` over the record and return the result.

        Raises:
            NotFoundAppError: If no such record exists.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: int) -> None:
        """Remove the record for ``user_id``.

        Raises:
            NotFoundAppError: If no such record exists.
        """
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the number of live records."""
        raise NotImplementedError
