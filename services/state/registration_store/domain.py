"""Domain contracts for Registration Store Service payloads.

Wire names are camelCase aliases; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field


class UnitCounts(BaseModel):
    """Counts for one unit and date, shared by records and audit snapshots."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    unit_id: str = Field(alias="unitId")
    date: date
    regular_count: int = Field(alias="regularCount")
    veg_count: int = Field(alias="vegCount")
    total_count: int = Field(alias="totalCount")

    def normalized(self) -> Self:
        """Report legacy total-only rows as regular meals.

        Rows written before the regular/vegetarian split carry only a total.
        The stored row is never changed.
        """
        if self.total_count > 0 and self.regular_count == 0 and self.veg_count == 0:
            return self.model_copy(
                update={"regular_count": self.total_count, "veg_count": 0}
            )
        return self


class RegistrationRecord(UnitCounts):
    """Meal counts registered by one unit for one date."""

    id: str | None = None
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    updated_by: str | None = Field(default=None, alias="updatedBy")

    @classmethod
    def zero(cls, *, unit_id: str, day: date) -> "RegistrationRecord":
        """Synthetic record for a unit that has not registered yet."""
        return cls(
            unit_id=unit_id,
            date=day,
            regular_count=0,
            veg_count=0,
            total_count=0,
        )


class AuditEntry(UnitCounts):
    """Snapshot appended whenever a unit's counts change."""

    id: str
    created_at: datetime = Field(alias="updatedAt")
    updated_by: str | None = Field(default=None, alias="updatedBy")


class RegistrationWrite(BaseModel):
    """Stored record plus whether the write appended an audit entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    record: RegistrationRecord
    audited: bool


class RegistrationSummary(BaseModel):
    """All units' counts for one date."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    date: date
    total_count: int = Field(alias="totalCount")
    per_unit: list[RegistrationRecord] = Field(alias="perUnit")


class HealthStatus(BaseModel):
    """Registration Store and relational store readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
