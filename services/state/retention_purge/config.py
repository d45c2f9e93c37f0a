"""Pydantic settings for Retention Purge Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from packages.canteen_shared.config import CanteenSettings, resolve_component_settings
from services.state.retention_purge.component import SERVICE_COMPONENT_ID


class RetentionPurgeSettings(BaseModel):
    """Retention Purge runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True


def resolve_retention_purge_settings(
    settings: CanteenSettings,
) -> RetentionPurgeSettings:
    """Resolve settings from ``components.service.retention_purge``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=RetentionPurgeSettings,
    )
