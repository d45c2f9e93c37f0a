"""Pydantic settings for Realtime Fan-out Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.canteen_shared.config import CanteenSettings, resolve_component_settings
from services.action.realtime_fanout.component import SERVICE_COMPONENT_ID


class RealtimeFanoutSettings(BaseModel):
    """Channel naming, backplane selection and per-client buffering."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel_prefix: str = "room:lunch"
    backplane: Literal["memory", "redis"] = "memory"
    subscriber_queue_size: int = Field(default=100, gt=0)

    @field_validator("channel_prefix", mode="before")
    @classmethod
    def _validate_channel_prefix(cls, value: object) -> object:
        """Reject blank prefixes and wildcard characters."""
        if isinstance(value, str):
            normalized = value.strip()
            if normalized == "":
                raise ValueError("channel_prefix must be non-empty")
            if any(char in normalized for char in "*?[]"):
                raise ValueError("channel_prefix must not contain glob characters")
            return normalized
        return value


def resolve_realtime_fanout_settings(
    settings: CanteenSettings,
) -> RealtimeFanoutSettings:
    """Resolve settings from ``components.service.realtime_fanout``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=RealtimeFanoutSettings,
    )
