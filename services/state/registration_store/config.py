"""Pydantic settings for Registration Store Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.canteen_shared.config import CanteenSettings, resolve_component_settings
from services.state.registration_store.component import SERVICE_COMPONENT_ID


class RegistrationStoreSettings(BaseModel):
    """Registration Store runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    history_limit: int = Field(default=30, gt=0)
    audit_limit: int = Field(default=200, gt=0)
    max_history_limit: int = Field(default=1000, gt=0)

    @model_validator(mode="after")
    def _defaults_within_max(self) -> "RegistrationStoreSettings":
        if max(self.history_limit, self.audit_limit) > self.max_history_limit:
            raise ValueError("default limits must not exceed max_history_limit")
        return self


def resolve_registration_store_settings(
    settings: CanteenSettings,
) -> RegistrationStoreSettings:
    """Resolve settings from ``components.service.registration_store``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=RegistrationStoreSettings,
    )
