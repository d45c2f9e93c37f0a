"""Purge repositories over registration and lock storage."""

from __future__ import annotations

from datetime import date

from sqlalchemy import delete

from resources.substrates.postgres import SessionProvider
from services.state.lock_controller.data.schema import lunch_locks
from services.state.registration_store.data.schema import (
    lunch_registration_audit,
    lunch_registrations,
)
from services.state.retention_purge.domain import PurgeCounts
from services.state.retention_purge.interfaces import (
    LockPurgeTarget,
    PurgeRepository,
    RegistrationPurgeTarget,
)


class InMemoryPurgeRepository(PurgeRepository):
    """Delegate deletes to in-memory registration and lock repositories."""

    def __init__(
        self,
        *,
        registrations: RegistrationPurgeTarget,
        locks: LockPurgeTarget,
    ) -> None:
        self._registrations = registrations
        self._locks = locks

    def delete_dated_before(self, *, cutoff: date) -> PurgeCounts:
        registrations, audit_entries = self._registrations.delete_dated_before(
            cutoff=cutoff
        )
        locks = self._locks.delete_dated_before(cutoff=cutoff)
        return PurgeCounts(
            registrations=registrations, audit_entries=audit_entries, locks=locks
        )


class SqlPurgeRepository(PurgeRepository):
    """Delete stale rows from all three dated tables in one transaction."""

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions

    def delete_dated_before(self, *, cutoff: date) -> PurgeCounts:
        with self._sessions.session() as session:
            registrations = session.execute(
                delete(lunch_registrations).where(
                    lunch_registrations.c.business_date < cutoff
                )
            )
            audit_entries = session.execute(
                delete(lunch_registration_audit).where(
                    lunch_registration_audit.c.business_date < cutoff
                )
            )
            locks = session.execute(
                delete(lunch_locks).where(lunch_locks.c.business_date < cutoff)
            )
            return PurgeCounts(
                registrations=int(registrations.rowcount or 0),
                audit_entries=int(audit_entries.rowcount or 0),
                locks=int(locks.rowcount or 0),
            )
