"""Storage adapters for user records."""

from app.adapters.storage.base import AbstractUserStore, UserRecord
from app.adapters.storage.in_memory import InMemoryUserStore

__all__ = [
    "AbstractUserStore",
    "InMemoryUserStore",
    "UserRecord",
]
