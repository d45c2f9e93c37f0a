"""Transport-neutral protocol interfaces used by Registration Store Service."""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from services.state.registration_store.domain import (
    AuditEntry,
    RegistrationRecord,
    RegistrationWrite,
)


class RegistrationRepository(Protocol):
    """Protocol for registration records and their audit trail."""

    def get_registration(
        self, *, unit_id: str, day: date
    ) -> RegistrationRecord | None:
        """Read one unit's record for one date."""

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
        """Upsert one record and append an audit entry when counts changed.

        The prior-state read, upsert and audit append form one atomic unit.
        ``force_audit`` appends an entry even when nothing changed.
        """

    def list_for_date(self, *, day: date) -> list[RegistrationRecord]:
        """Return every unit's record for ``day`` ordered by unit id."""

    def list_audit(self, *, unit_id: str | None, limit: int) -> list[AuditEntry]:
        """Return newest-first audit entries, optionally for one unit."""

    def delete_dated_before(self, *, cutoff: date) -> tuple[int, int]:
        """Delete records and audit entries dated before ``cutoff``."""
