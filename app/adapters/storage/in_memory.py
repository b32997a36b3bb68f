"""In-memory user store.

Notes:
- Per-process only: records are lost on restart.
- Thread-safe: create/update/delete and snapshot reads share one lock.
- Ids come from a counter that only moves forward, so a deleted id is never
  handed out again.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

from app.adapters.storage.base import RESERVED_FIELDS, AbstractUserStore, UserRecord
from app.core.errors import NotFoundAppError

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _strip_reserved(fields: Mapping[str, Any]) -> dict[str, Any]:
    dropped = RESERVED_FIELDS.intersection(fields)
    if dropped:
        logger.debug("user_store.reserved_fields_ignored", extra={"fields": sorted(dropped)})
    return {k: v for k, v in fields.items() if k not in RESERVED_FIELDS}


class InMemoryUserStore(AbstractUserStore):
    """Dict-backed user store owning id allocation and timestamps.

    Records are immutable; an update swaps in a merged copy, so readers only
    ever see fully applied writes.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._records: dict[int, UserRecord] = {}
        self._next_id = 1

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryUserStore(size={len(self._records)}, next_id={self._next_id})"

    def list(self) -> list[UserRecord]:
        with self._lock:
            return list(self._records.values())

    def create(self, fields: Mapping[str, Any]) -> UserRecord:
        """Allocate the next id, stamp both timestamps and store the record."""
        values = _strip_reserved(fields)
        with self._lock:
            user_id = self._next_id
            self._next_id += 1
            now = self._clock()
            record = UserRecord(id=user_id, fields=values, created_at=now, updated_at=now)
            self._records[user_id] = record
            return record

    def get_by_id(self, user_id: int) -> UserRecord:
        with self._lock:
            record = self._records.get(user_id)
        if record is None:
            raise _not_found(user_id)
        return record

    def update(self, user_id: int, fields: Mapping[str, Any]) -> UserRecord:
        """Shallow-merge ``fields`` over the stored record.

        Supplied keys overwrite existing ones; other keys are untouched.
        ``updated_at`` always moves strictly forward, even when the clock
        has not advanced since the last write.
        """
        values = _strip_reserved(fields)
        with self._lock:
            current = self._records.get(user_id)
            if current is None:
                raise _not_found(user_id)

            updated_at = max(self._clock(), current.updated_at + _TICK)
            record = replace(
                current,
                fields={**current.fields, **values},
                updated_at=updated_at,
            )
            self._records[user_id] = record
            return record

    def delete(self, user_id: int) -> None:
        with self._lock:
            if self._records.pop(user_id, None) is None:
                raise _not_found(user_id)

    def count(self) -> int:
        with self._lock:
            return len(self._records)


def _not_found(user_id: int) -> NotFoundAppError:
    return NotFoundAppError(
        code="user_not_found",
        message="User not found",
        details={"user_id": user_id},
    )
