"""Typed configuration models for Canteen runtime settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "canteen" / "canteen.yaml"
CONFIG_FILE_ENV = "CANTEEN_CONFIG_FILE"


class LoggingSettings(BaseModel):
    """Structured logging configuration shared by Canteen components."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "canteen"
    environment: str = "dev"


class HttpSettings(BaseModel):
    """Bind address for the HTTP and WebSocket runtime."""

    host: str = "127.0.0.1"
    port: int = Field(default=3000, gt=0, lt=65536)


class BusinessDaySettings(BaseModel):
    """Wall-clock rules for the active date and the automatic lock window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timezone: str = "UTC"
    lock_window_start_hour: int = Field(default=9, ge=0, le=23)
    rollover_hour: int = Field(default=12, ge=1, le=23)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @model_validator(mode="after")
    def _window_precedes_rollover(self) -> "BusinessDaySettings":
        """Require the automatic window to open before the rollover hour."""
        if self.lock_window_start_hour >= self.rollover_hour:
            raise ValueError(
                "business_day.lock_window_start_hour must be < rollover_hour"
            )
        return self


class PersistenceSettings(BaseModel):
    """Selection of the backing store for registrations, audit rows and locks."""

    backend: Literal["sql", "memory"] = "sql"


class ComponentNamespaceSettings(BaseModel):
    """Namespace map for grouped component settings under ``components.<kind>``."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """Typed ``components`` subtree with support for component-local extras."""

    model_config = ConfigDict(extra="allow")

    service: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    substrate: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_component_keys(cls, value: object) -> object:
        """Reject flat component keys in favor of grouped namespaces."""
        if not isinstance(value, dict):
            return value
        flat_prefixed_keys = tuple(
            key
            for key in value
            if isinstance(key, str) and key.startswith(("service_", "substrate_"))
        )
        if not flat_prefixed_keys:
            return value

        bad_key = flat_prefixed_keys[0]
        kind, _, name = bad_key.partition("_")
        raise ValueError(
            f"components.{bad_key} is invalid; use components.{kind}.{name} instead"
        )


class CanteenSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="CANTEEN_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    business_day: BusinessDaySettings = Field(default_factory=BusinessDaySettings)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply Canteen precedence: init > env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )


def load_settings(*, config_path: Path | None = None) -> CanteenSettings:
    """Load root settings, honoring ``CANTEEN_CONFIG_FILE`` when set."""
    resolved = config_path
    if resolved is None:
        override = os.getenv(CONFIG_FILE_ENV, "").strip()
        resolved = Path(override) if override else DEFAULT_CONFIG_PATH

    class _Settings(CanteenSettings):
        _config_path: ClassVar[Path] = resolved

    return _Settings()


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: CanteenSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from grouped ``components`` keys."""
    raw_components = settings.components.model_dump(mode="python")
    kind, separator, name = component_id.partition("_")
    if not separator or kind not in {"service", "substrate"}:
        raise ValueError(f"component id '{component_id}' has no known kind prefix")

    namespace = raw_components.get(kind, {})
    namespace_path = f"components.{kind}"
    if not isinstance(namespace, dict):
        raise TypeError(f"{namespace_path} must resolve to an object mapping")
    resolved = namespace.get(name, {})
    if not isinstance(resolved, dict):
        raise TypeError(f"{namespace_path}.{name} must resolve to an object mapping")
    return model.model_validate(resolved)
