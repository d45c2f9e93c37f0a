"""Transport-neutral protocol interfaces used by Lock Controller Service."""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from services.state.lock_controller.domain import LockRecord


class LockRepository(Protocol):
    """Protocol for per-date lock flag persistence."""

    def get_lock(self, *, day: date) -> LockRecord | None:
        """Read the stored flag for one date."""

    def upsert_lock(
        self,
        *,
        day: date,
        locked: bool,
        locked_at: datetime | None,
        locked_by: str | None,
        updated_at: datetime,
    ) -> LockRecord:
        """Create or replace the flag for one date and return the stored row."""

    def delete_dated_before(self, *, cutoff: date) -> int:
        """Delete flags dated strictly before ``cutoff``; return the count."""
