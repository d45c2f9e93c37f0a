"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.canteen_shared.config import (
    BusinessDaySettings,
    CanteenSettings,
    load_settings,
    resolve_component_settings,
)
from services.state.registration_store.config import RegistrationStoreSettings


def test_load_settings_applies_env_over_yaml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Env values should override YAML, and YAML should override defaults."""
    config_file = tmp_path / "canteen.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "business_day:",
                "  timezone: Europe/Berlin",
                "components:",
                "  service:",
                "    registration_store:",
                "      history_limit: 10",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("CANTEEN_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("CANTEEN_PERSISTENCE__BACKEND", "memory")

    settings = load_settings(config_path=config_file)
    store = resolve_component_settings(
        settings=settings,
        component_id="service_registration_store",
        model=RegistrationStoreSettings,
    )

    assert settings.logging.level == "ERROR"
    assert settings.business_day.timezone == "Europe/Berlin"
    assert settings.persistence.backend == "memory"
    assert store.history_limit == 10
    assert store.audit_limit == 200


def test_load_settings_honors_config_file_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "override.yaml"
    config_file.write_text("http:\n  port: 8080\n", encoding="utf-8")
    monkeypatch.setenv("CANTEEN_CONFIG_FILE", str(config_file))

    assert load_settings().http.port == 8080


def test_missing_component_block_resolves_defaults() -> None:
    store = resolve_component_settings(
        settings=CanteenSettings(),
        component_id="service_registration_store",
        model=RegistrationStoreSettings,
    )

    assert store == RegistrationStoreSettings()


def test_flat_component_keys_are_rejected() -> None:
    with pytest.raises(ValidationError):
        CanteenSettings(components={"service_registration_store": {}})


def test_unknown_component_keys_are_rejected() -> None:
    settings = CanteenSettings(
        components={"service": {"registration_store": {"history_lmit": 5}}}
    )

    with pytest.raises(ValidationError):
        resolve_component_settings(
            settings=settings,
            component_id="service_registration_store",
            model=RegistrationStoreSettings,
        )


def test_business_day_settings_validate_timezone_and_hours() -> None:
    with pytest.raises(ValidationError):
        BusinessDaySettings(timezone="Mars/Olympus")
    with pytest.raises(ValidationError):
        BusinessDaySettings(lock_window_start_hour=13, rollover_hour=12)
