"""Transport-neutral protocol interfaces used by Retention Purge Service."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from services.state.retention_purge.domain import PurgeCounts


class PurgeRepository(Protocol):
    """Protocol for deleting dated rows across registration and lock storage."""

    def delete_dated_before(self, *, cutoff: date) -> PurgeCounts:
        """Delete rows dated strictly before ``cutoff`` and return counts."""


class RegistrationPurgeTarget(Protocol):
    """Registration storage that can drop records and audit rows by date."""

    def delete_dated_before(self, *, cutoff: date) -> tuple[int, int]:
        """Return ``(registrations, audit_entries)`` deleted."""


class LockPurgeTarget(Protocol):
    """Lock storage that can drop flags by date."""

    def delete_dated_before(self, *, cutoff: date) -> int:
        """Return the number of lock rows deleted."""
