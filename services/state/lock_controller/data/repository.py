"""In-memory and SQL repositories for per-date lock flags."""

from __future__ import annotations

from datetime import UTC, date, datetime
from threading import RLock
from typing import Any

from sqlalchemy import delete, select

from resources.substrates.postgres import SessionProvider, upsert_statement
from services.state.lock_controller.domain import LockRecord
from services.state.lock_controller.interfaces import LockRepository

from .schema import lunch_locks


class InMemoryLockRepository(LockRepository):
    """Thread-safe dictionary-backed repository used by unit tests."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._rows: dict[date, LockRecord] = {}

    def get_lock(self, *, day: date) -> LockRecord | None:
        with self._lock:
            return self._rows.get(day)

    def upsert_lock(
        self,
        *,
        day: date,
        locked: bool,
        locked_at: datetime | None,
        locked_by: str | None,
        updated_at: datetime,
    ) -> LockRecord:
        record = LockRecord(
            date=day,
            locked=locked,
            locked_at=locked_at,
            locked_by=locked_by,
            updated_at=updated_at,
        )
        with self._lock:
            self._rows[day] = record
        return record

    def delete_dated_before(self, *, cutoff: date) -> int:
        with self._lock:
            stale = [day for day in self._rows if day < cutoff]
            for day in stale:
                del self._rows[day]
            return len(stale)


class SqlLockRepository(LockRepository):
    """SQL repository over the ``lunch_locks`` table."""

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions

    def get_lock(self, *, day: date) -> LockRecord | None:
        with self._sessions.session() as session:
            row = (
                session.execute(
                    select(lunch_locks).where(lunch_locks.c.business_date == day)
                )
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_lock(row)

    def upsert_lock(
        self,
        *,
        day: date,
        locked: bool,
        locked_at: datetime | None,
        locked_by: str | None,
        updated_at: datetime,
    ) -> LockRecord:
        with self._sessions.session() as session:
            session.execute(
                upsert_statement(
                    session,
                    lunch_locks,
                    values={
                        "business_date": day,
                        "locked": locked,
                        "locked_at": locked_at,
                        "locked_by": locked_by,
                        "updated_at": updated_at,
                    },
                    index_elements=["business_date"],
                    update_columns=["locked", "locked_at", "locked_by", "updated_at"],
                )
            )
            row = (
                session.execute(
                    select(lunch_locks).where(lunch_locks.c.business_date == day)
                )
                .mappings()
                .one()
            )
            return _to_lock(row)

    def delete_dated_before(self, *, cutoff: date) -> int:
        with self._sessions.session() as session:
            result = session.execute(
                delete(lunch_locks).where(lunch_locks.c.business_date < cutoff)
            )
            return int(result.rowcount or 0)


def _to_lock(row: Any) -> LockRecord:
    return LockRecord(
        date=row["business_date"],
        locked=bool(row["locked"]),
        locked_at=_row_dt(row["locked_at"]),
        locked_by=row["locked_by"],
        updated_at=_row_dt(row["updated_at"]),
    )


def _row_dt(value: datetime | None) -> datetime | None:
    """Normalize stored timestamps to aware UTC; SQLite returns naive values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
