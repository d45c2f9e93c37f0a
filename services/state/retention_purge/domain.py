"""Domain contracts for Retention Purge Service payloads."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict


class PurgeCounts(BaseModel):
    """Rows deleted by one purge pass."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    registrations: int = 0
    audit_entries: int = 0
    locks: int = 0

    @property
    def total(self) -> int:
        return self.registrations + self.audit_entries + self.locks


class PurgeReport(BaseModel):
    """Outcome of one purge request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ran: bool
    cutoff: date | None = None
    deleted: PurgeCounts = PurgeCounts()


class HealthStatus(BaseModel):
    """Retention Purge and relational store readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    enabled: bool
    detail: str
