"""SQL repository tests for registrations and audit entries on in-memory SQLite."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime, timedelta

from resources.substrates.postgres import PostgresSettings, SharedPostgresSubstrate
from services.state.lock_controller.data import LockDataRuntime
from services.state.registration_store.data import (
    RegistrationDataRuntime,
    SqlRegistrationRepository,
)
from services.state.retention_purge.data import SqlPurgeRepository

NOW = datetime(2024, 6, 3, 8, 0, tzinfo=UTC)
DAY = date(2024, 6, 3)


def _substrate() -> SharedPostgresSubstrate:
    return SharedPostgresSubstrate.in_memory(settings=PostgresSettings())


def _repository() -> SqlRegistrationRepository:
    return RegistrationDataRuntime.from_substrate(_substrate()).repository


def _write(
    repository: SqlRegistrationRepository,
    unit_id: str,
    regular: int,
    veg: int,
    *,
    at: datetime = NOW,
    day: date = DAY,
    force_audit: bool = False,
):
    return repository.write_registration(
        unit_id=unit_id,
        day=day,
        regular_count=regular,
        veg_count=veg,
        updated_by="Ana",
        updated_at=at,
        force_audit=force_audit,
    )


def test_upsert_keeps_row_id_and_audits_only_changes() -> None:
    repository = _repository()

    first = _write(repository, "Sales", 10, 2)
    repeat = _write(repository, "Sales", 10, 2, at=NOW + timedelta(minutes=1))
    changed = _write(repository, "Sales", 11, 2, at=NOW + timedelta(minutes=2))

    assert first.audited is True
    assert repeat.audited is False
    assert changed.audited is True
    assert changed.record.id == first.record.id
    assert changed.record.total_count == 13
    assert changed.record.updated_at == NOW + timedelta(minutes=2)
    history = repository.list_audit(unit_id="Sales", limit=10)
    assert [entry.regular_count for entry in history] == [11, 10]


def test_forced_audit_records_repeated_zero_writes() -> None:
    repository = _repository()

    _write(repository, "Sales", 0, 0, force_audit=True)
    _write(repository, "Sales", 0, 0, force_audit=True)

    assert len(repository.list_audit(unit_id=None, limit=10)) == 2


def test_list_for_date_orders_by_unit() -> None:
    repository = _repository()
    _write(repository, "Sales", 1, 0)
    _write(repository, "Accounting", 2, 0)
    _write(repository, "HR", 3, 0, day=date(2024, 6, 4))

    rows = repository.list_for_date(day=DAY)

    assert [row.unit_id for row in rows] == ["Accounting", "Sales"]


def test_audit_listing_is_newest_first_and_limited() -> None:
    repository = _repository()
    for minute in range(3):
        _write(repository, "Sales", minute + 1, 0, at=NOW + timedelta(minutes=minute))
    _write(repository, "HR", 9, 0, at=NOW + timedelta(minutes=5))

    own = repository.list_audit(unit_id="Sales", limit=2)
    everyone = repository.list_audit(unit_id=None, limit=10)

    assert [entry.regular_count for entry in own] == [3, 2]
    assert everyone[0].unit_id == "HR"
    assert everyone[0].created_at == NOW + timedelta(minutes=5)
    assert len(everyone) == 4


def test_missing_registration_reads_as_none() -> None:
    assert _repository().get_registration(unit_id="Sales", day=DAY) is None


def test_purge_repository_deletes_across_owned_tables() -> None:
    """Purge runs over the shared store and keeps rows dated at the cutoff."""
    substrate = _substrate()
    repository = RegistrationDataRuntime.from_substrate(substrate).repository
    locks = LockDataRuntime.from_substrate(substrate).repository
    _write(repository, "Sales", 1, 0, day=date(2024, 6, 2))
    _write(repository, "Sales", 2, 0, day=DAY)
    locks.upsert_lock(
        day=date(2024, 6, 2),
        locked=True,
        locked_at=NOW,
        locked_by="Boss",
        updated_at=NOW,
    )

    counts = SqlPurgeRepository(substrate.sessions).delete_dated_before(cutoff=DAY)

    assert (counts.registrations, counts.audit_entries, counts.locks) == (1, 1, 1)
    assert repository.get_registration(unit_id="Sales", day=DAY) is not None
    assert repository.get_registration(unit_id="Sales", day=date(2024, 6, 2)) is None


def test_concurrent_writes_audit_every_change_exactly_once() -> None:
    """Threaded writers on the shared in-memory store keep audit rows exact."""
    repository = _repository()
    units = [f"Unit{index}" for index in range(8)]

    def _changing(index: int):
        return _write(repository, units[index % 8], index, 1)

    def _repeating(_index: int):
        return _write(repository, "Kitchen", 5, 5)

    with ThreadPoolExecutor(max_workers=16) as executor:
        changing = list(executor.map(_changing, range(400)))
        repeating = list(executor.map(_repeating, range(40)))

    assert all(write.audited for write in changing)
    assert sum(write.audited for write in repeating) == 1
    assert len(repository.list_audit(unit_id=None, limit=1000)) == 401
    assert len(repository.list_for_date(day=DAY)) == 9
