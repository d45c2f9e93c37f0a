"""Domain contracts for Lock Controller Service payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LockReason = Literal["manual", "automatic"]


class LockRecord(BaseModel):
    """Stored administrative lock flag for one date."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: date
    locked: bool
    locked_at: datetime | None
    locked_by: str | None
    updated_at: datetime


class LockState(BaseModel):
    """Effective lock for one date, merged with the automatic window."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    date: date
    locked: bool
    locked_at: datetime | None = Field(default=None, alias="lockedAt")
    locked_by: str | None = Field(default=None, alias="lockedBy")


class LockEvaluation(BaseModel):
    """Whether writes to one date are refused, and why."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: date
    locked: bool
    reason: LockReason | None = None


class HealthStatus(BaseModel):
    """Lock Controller and store readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
