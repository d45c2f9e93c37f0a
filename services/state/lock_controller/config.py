"""Pydantic settings for Lock Controller Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.canteen_shared.config import CanteenSettings, resolve_component_settings
from services.state.lock_controller.component import SERVICE_COMPONENT_ID


class LockControllerSettings(BaseModel):
    """Lock Controller runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    system_actor: str = "system"

    @field_validator("system_actor", mode="before")
    @classmethod
    def _validate_system_actor(cls, value: object) -> object:
        """Reject a blank name for automatic locks."""
        if isinstance(value, str):
            normalized = value.strip()
            if normalized == "":
                raise ValueError("system_actor must be non-empty")
            return normalized
        return value


def resolve_lock_controller_settings(
    settings: CanteenSettings,
) -> LockControllerSettings:
    """Resolve settings from ``components.service.lock_controller``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=LockControllerSettings,
    )
