"""Public API for shared Canteen configuration utilities."""

from .models import (
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG_PATH,
    BusinessDaySettings,
    CanteenSettings,
    ComponentsSettings,
    HttpSettings,
    LoggingSettings,
    PersistenceSettings,
    load_settings,
    resolve_component_settings,
)

__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULT_CONFIG_PATH",
    "BusinessDaySettings",
    "CanteenSettings",
    "ComponentsSettings",
    "HttpSettings",
    "LoggingSettings",
    "PersistenceSettings",
    "load_settings",
    "resolve_component_settings",
]
