"""Behavior tests for Retention Purge Service implementation."""

from __future__ import annotations

from datetime import UTC, date, datetime

from packages.canteen_shared.business_day import BusinessDayPolicy
from packages.canteen_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from packages.canteen_shared.errors import ErrorCategory
from services.state.lock_controller.data import InMemoryLockRepository
from services.state.retention_purge.config import RetentionPurgeSettings
from services.state.retention_purge.data import InMemoryPurgeRepository
from services.state.retention_purge.domain import PurgeCounts
from services.state.retention_purge.implementation import (
    DefaultRetentionPurgeService,
)

NOW = datetime(2024, 6, 3, 8, 0, tzinfo=UTC)


class _FakeRegistrations:
    def __init__(self, days: list[date]) -> None:
        self.days = list(days)
        self.cutoffs: list[date] = []

    def delete_dated_before(self, *, cutoff: date) -> tuple[int, int]:
        self.cutoffs.append(cutoff)
        stale = [day for day in self.days if day < cutoff]
        self.days = [day for day in self.days if day >= cutoff]
        return len(stale), len(stale) * 2


class _BrokenRepository:
    def delete_dated_before(self, *, cutoff: date) -> PurgeCounts:
        raise ConnectionError("store down")


def _meta() -> EnvelopeMeta:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="system")


def _service(
    *, at: datetime, registrations: _FakeRegistrations, enabled: bool = True
) -> tuple[DefaultRetentionPurgeService, InMemoryLockRepository]:
    locks = InMemoryLockRepository()
    for day in (date(2024, 6, 3), date(2024, 6, 4)):
        locks.upsert_lock(
            day=day, locked=True, locked_at=NOW, locked_by="Boss", updated_at=NOW
        )
    service = DefaultRetentionPurgeService(
        settings=RetentionPurgeSettings(enabled=enabled),
        policy=BusinessDayPolicy(),
        repository=InMemoryPurgeRepository(registrations=registrations, locks=locks),
        clock=lambda: at,
    )
    return service, locks


def test_morning_requests_do_not_purge() -> None:
    """Before the rollover hour nothing is deleted."""
    registrations = _FakeRegistrations([date(2024, 6, 3)])
    service, locks = _service(
        at=datetime(2024, 6, 3, 11, 59, tzinfo=UTC), registrations=registrations
    )

    result = service.purge_if_due(meta=_meta())

    assert result.value is not None
    assert result.value.ran is False
    assert registrations.cutoffs == []
    assert locks.get_lock(day=date(2024, 6, 3)) is not None


def test_afternoon_purge_removes_dates_before_active_date() -> None:
    """From noon the active date is tomorrow; today and older are purged."""
    registrations = _FakeRegistrations([date(2024, 6, 2), date(2024, 6, 3)])
    service, locks = _service(
        at=datetime(2024, 6, 3, 12, 0, tzinfo=UTC), registrations=registrations
    )

    result = service.purge_if_due(meta=_meta())

    assert result.value is not None
    assert result.value.ran is True
    assert result.value.cutoff == date(2024, 6, 4)
    assert result.value.deleted == PurgeCounts(
        registrations=2, audit_entries=4, locks=1
    )
    assert locks.get_lock(day=date(2024, 6, 3)) is None
    assert locks.get_lock(day=date(2024, 6, 4)) is not None


def test_repeated_purge_is_idempotent() -> None:
    registrations = _FakeRegistrations([date(2024, 6, 3)])
    service, _locks = _service(
        at=datetime(2024, 6, 3, 18, 0, tzinfo=UTC), registrations=registrations
    )

    service.purge_if_due(meta=_meta())
    second = service.purge_if_due(meta=_meta())

    assert second.value is not None
    assert second.value.deleted.total == 0


def test_disabled_purge_never_runs() -> None:
    registrations = _FakeRegistrations([date(2024, 6, 1)])
    service, _locks = _service(
        at=datetime(2024, 6, 3, 18, 0, tzinfo=UTC),
        registrations=registrations,
        enabled=False,
    )

    result = service.purge_if_due(meta=_meta())

    assert result.value is not None and result.value.ran is False
    assert registrations.days == [date(2024, 6, 1)]


def test_purge_before_accepts_explicit_cutoff_at_any_hour() -> None:
    registrations = _FakeRegistrations([date(2024, 6, 1), date(2024, 6, 3)])
    service, _locks = _service(at=NOW, registrations=registrations)

    result = service.purge_before(meta=_meta(), cutoff="2024-06-02")

    assert result.value is not None
    assert result.value.deleted.registrations == 1
    assert registrations.days == [date(2024, 6, 3)]


def test_store_failure_is_reported_as_dependency_error() -> None:
    """A failed purge is returned, never raised, so callers can proceed."""
    service = DefaultRetentionPurgeService(
        settings=RetentionPurgeSettings(),
        policy=BusinessDayPolicy(),
        repository=_BrokenRepository(),
        clock=lambda: datetime(2024, 6, 3, 13, 0, tzinfo=UTC),
    )

    result = service.purge_if_due(meta=_meta())

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.DEPENDENCY


def test_health_reports_store_readiness() -> None:
    registrations = _FakeRegistrations([])
    service, _locks = _service(at=NOW, registrations=registrations, enabled=False)

    result = service.health(meta=_meta())

    assert result.value is not None
    assert result.value.substrate_ready is True
    assert result.value.enabled is False
    assert result.value.detail == "ok"


def test_health_reports_failed_store_probe() -> None:
    def _probe() -> bool:
        raise ConnectionError("store down")

    service = DefaultRetentionPurgeService(
        settings=RetentionPurgeSettings(),
        policy=BusinessDayPolicy(),
        repository=_BrokenRepository(),
        clock=lambda: NOW,
        readiness=_probe,
    )

    result = service.health(meta=_meta())

    assert result.ok is True
    assert result.value is not None
    assert result.value.substrate_ready is False
    assert result.value.detail == "store probe failed: ConnectionError"
