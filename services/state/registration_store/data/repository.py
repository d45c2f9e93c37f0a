"""In-memory and SQL repositories for registration records and audit entries."""

from __future__ import annotations

from datetime import UTC, date, datetime
from threading import RLock
from typing import Any

from sqlalchemy import delete, insert, select

from packages.canteen_shared.ids import generate_ulid_str, ulid_at
from resources.substrates.postgres import SessionProvider, upsert_statement
from services.state.registration_store.domain import (
    AuditEntry,
    RegistrationRecord,
    RegistrationWrite,
)
from services.state.registration_store.interfaces import RegistrationRepository

from .schema import lunch_registration_audit, lunch_registrations


class InMemoryRegistrationRepository(RegistrationRepository):
    """Thread-safe dictionary-backed repository used by unit tests."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._records: dict[tuple[str, date], RegistrationRecord] = {}
        self._audit: list[AuditEntry] = []

    def get_registration(
        self, *, unit_id: str, day: date
    ) -> RegistrationRecord | None:
        with self._lock:
            return self._records.get((unit_id, day))

    def write_registration(
        self,
        *,
        unit_id: str,
        day: date,
        regular_count: int,
        veg_count: int,
        updated_by: str | None,
        updated_at: datetime,
        force_audit: bool = False,
    ) -> RegistrationWrite:
        total_count = regular_count + veg_count
        with self._lock:
            existing = self._records.get((unit_id, day))
            record = RegistrationRecord(
                id=generate_ulid_str() if existing is None else existing.id,
                unit_id=unit_id,
                date=day,
                regular_count=regular_count,
                veg_count=veg_count,
                total_count=total_count,
                updated_at=updated_at,
                updated_by=updated_by,
            )
            self._records[(unit_id, day)] = record
            audited = force_audit or _counts_changed(
                existing, (regular_count, veg_count, total_count)
            )
            if audited:
                self._audit.append(_audit_entry(record, created_at=updated_at))
            return RegistrationWrite(record=record, audited=audited)

    def list_for_date(self, *, day: date) -> list[RegistrationRecord]:
        with self._lock:
            rows = [record for record in self._records.values() if record.date == day]
        return sorted(rows, key=lambda record: record.unit_id)

    def list_audit(self, *, unit_id: str | None, limit: int) -> list[AuditEntry]:
        with self._lock:
            rows = [
                entry
                for entry in reversed(self._audit)
                if unit_id is None or entry.unit_id == unit_id
            ]
        rows.sort(key=lambda entry: entry.created_at, reverse=True)
        return rows[:limit]

    def delete_dated_before(self, *, cutoff: date) -> tuple[int, int]:
        with self._lock:
            stale = [
                key for key, record in self._records.items() if record.date < cutoff
            ]
            for key in stale:
                del self._records[key]
            kept = [entry for entry in self._audit if entry.date >= cutoff]
            removed_audit = len(self._audit) - len(kept)
            self._audit = kept
            return len(stale), removed_audit


class SqlRegistrationRepository(RegistrationRepository):
    """SQL repository over the registration and audit tables."""

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions

    def get_registration(
        self, *, unit_id: str, day: date
    ) -> RegistrationRecord | None:
        with self._sessions.session() as session:
            row = (
                session.execute(_select_registration(unit_id, day))
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_record(row)

    def write_registration(
        self,
        *,
        unit_id: str,
        day: date,
        regular_count: int,
        veg_count: int,
        updated_by: str | None,
        updated_at: datetime,
        force_audit: bool = False,
    ) -> RegistrationWrite:
        total_count = regular_count + veg_count
        with self._sessions.session() as session:
            existing_row = (
                session.execute(_select_registration(unit_id, day).with_for_update())
                .mappings()
                .one_or_none()
            )
            existing = None if existing_row is None else _to_record(existing_row)
            session.execute(
                upsert_statement(
                    session,
                    lunch_registrations,
                    values={
                        "id": generate_ulid_str(),
                        "unit_id": unit_id,
                        "business_date": day,
                        "regular_count": regular_count,
                        "veg_count": veg_count,
                        "total_count": total_count,
                        "updated_at": updated_at,
                        "updated_by": updated_by,
                    },
                    index_elements=["unit_id", "business_date"],
                    update_columns=[
                        "regular_count",
                        "veg_count",
                        "total_count",
                        "updated_at",
                        "updated_by",
                    ],
                )
            )
            record = _to_record(
                session.execute(_select_registration(unit_id, day)).mappings().one()
            )
            audited = force_audit or _counts_changed(
                existing, (regular_count, veg_count, total_count)
            )
            if audited:
                entry = _audit_entry(record, created_at=updated_at)
                session.execute(
                    insert(lunch_registration_audit).values(
                        id=entry.id,
                        unit_id=entry.unit_id,
                        business_date=entry.date,
                        regular_count=entry.regular_count,
                        veg_count=entry.veg_count,
                        total_count=entry.total_count,
                        created_at=entry.created_at,
                        updated_by=entry.updated_by,
                    )
                )
            return RegistrationWrite(record=record, audited=audited)

    def list_for_date(self, *, day: date) -> list[RegistrationRecord]:
        with self._sessions.session() as session:
            rows = (
                session.execute(
                    select(lunch_registrations)
                    .where(lunch_registrations.c.business_date == day)
                    .order_by(lunch_registrations.c.unit_id.asc())
                )
                .mappings()
                .all()
            )
            return [_to_record(row) for row in rows]

    def list_audit(self, *, unit_id: str | None, limit: int) -> list[AuditEntry]:
        stmt = select(lunch_registration_audit)
        if unit_id is not None:
            stmt = stmt.where(lunch_registration_audit.c.unit_id == unit_id)
        stmt = stmt.order_by(
            lunch_registration_audit.c.created_at.desc(),
            lunch_registration_audit.c.id.desc(),
        ).limit(limit)
        with self._sessions.session() as session:
            rows = session.execute(stmt).mappings().all()
            return [_to_audit(row) for row in rows]

    def delete_dated_before(self, *, cutoff: date) -> tuple[int, int]:
        with self._sessions.session() as session:
            records = session.execute(
                delete(lunch_registrations).where(
                    lunch_registrations.c.business_date < cutoff
                )
            )
            audit = session.execute(
                delete(lunch_registration_audit).where(
                    lunch_registration_audit.c.business_date < cutoff
                )
            )
            return int(records.rowcount or 0), int(audit.rowcount or 0)


def _select_registration(unit_id: str, day: date) -> Any:
    return select(lunch_registrations).where(
        lunch_registrations.c.unit_id == unit_id,
        lunch_registrations.c.business_date == day,
    )


def _counts_changed(
    existing: RegistrationRecord | None, counts: tuple[int, int, int]
) -> bool:
    if existing is None:
        return True
    return (
        existing.regular_count,
        existing.veg_count,
        existing.total_count,
    ) != counts


def _audit_entry(record: RegistrationRecord, *, created_at: datetime) -> AuditEntry:
    return AuditEntry(
        id=ulid_at(created_at),
        unit_id=record.unit_id,
        date=record.date,
        regular_count=record.regular_count,
        veg_count=record.veg_count,
        total_count=record.total_count,
        created_at=created_at,
        updated_by=record.updated_by,
    )


def _to_record(row: Any) -> RegistrationRecord:
    return RegistrationRecord(
        id=row["id"],
        unit_id=row["unit_id"],
        date=row["business_date"],
        regular_count=int(row["regular_count"]),
        veg_count=int(row["veg_count"]),
        total_count=int(row["total_count"]),
        updated_at=_row_dt(row, "updated_at"),
        updated_by=row["updated_by"],
    )


def _to_audit(row: Any) -> AuditEntry:
    return AuditEntry(
        id=row["id"],
        unit_id=row["unit_id"],
        date=row["business_date"],
        regular_count=int(row["regular_count"]),
        veg_count=int(row["veg_count"]),
        total_count=int(row["total_count"]),
        created_at=_row_dt(row, "created_at"),
        updated_by=row["updated_by"],
    )


def _row_dt(row: Any, column: str) -> datetime:
    """Read one timestamp column as aware UTC; SQLite returns naive values."""
    value = row[column]
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime column for {column}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
