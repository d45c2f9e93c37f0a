"""Domain contracts for Realtime Fan-out Service payloads."""

from __future__ import annotations

import json
from datetime import date
from typing import Mapping

from pydantic import BaseModel, ConfigDict

EVENT_DEPARTMENT = "department"
EVENT_LOCK = "lock"


class PublishReceipt(BaseModel):
    """Outcome of one publish on a date channel."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel: str
    date: date
    event_type: str
    delivered: int


class SubscriptionInfo(BaseModel):
    """Channel joined by one subscriber."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel: str
    date: date


class HealthStatus(BaseModel):
    """Fan-out and backplane readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    backplane: str
    backplane_ready: bool
    subscribers: int
    detail: str


def channel_name(prefix: str, day: date) -> str:
    """Return the channel shared by every client watching ``day``."""
    return f"{prefix}:{day.isoformat()}"


def encode_event(event_type: str, body: Mapping[str, object]) -> str:
    """Serialize ``{"type": t, t: body}`` as compact JSON."""
    return json.dumps(
        {"type": event_type, event_type: dict(body)},
        separators=(",", ":"),
        default=str,
    )
