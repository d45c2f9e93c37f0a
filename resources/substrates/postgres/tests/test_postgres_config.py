"""Tests for relational substrate configuration and engine wiring."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from packages.canteen_shared.config import CanteenSettings
from resources.substrates.postgres.config import (
    PostgresSettings,
    resolve_postgres_settings,
)
from resources.substrates.postgres.engine import create_postgres_engine


def test_postgres_settings_defaults() -> None:
    """Defaults should enable pre-ping and leave schema bootstrap off."""
    settings = PostgresSettings()

    assert settings.pool_pre_ping is True
    assert settings.create_schema is False
    assert settings.url.startswith("postgresql+psycopg://")


def test_postgres_settings_reject_blank_url() -> None:
    """A blank url should fail validation."""
    with pytest.raises(ValidationError):
        PostgresSettings(url="   ")


def test_postgres_settings_reject_unknown_sslmode() -> None:
    """Only libpq sslmode values should be accepted."""
    with pytest.raises(ValidationError):
        PostgresSettings(sslmode="sometimes")


def test_resolve_postgres_settings_reads_substrate_namespace() -> None:
    """Settings should resolve from ``components.substrate.postgres``."""
    root = CanteenSettings(
        components={
            "substrate": {
                "postgres": {
                    "url": "postgresql+psycopg://u:p@db:5432/lunch",
                    "create_schema": True,
                }
            }
        }
    )

    resolved = resolve_postgres_settings(root)

    assert resolved.url == "postgresql+psycopg://u:p@db:5432/lunch"
    assert resolved.create_schema is True


def test_engine_passes_pool_and_connect_settings(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Engine builder should forward pool and libpq connect options."""
    captured: dict[str, object] = {}

    def fake_create_engine(url: str, **kwargs: object) -> object:
        captured["url"] = url
        captured.update(kwargs)
        return object()

    import resources.substrates.postgres.engine as engine_module

    monkeypatch.setattr(engine_module, "create_engine", fake_create_engine)

    create_postgres_engine(
        PostgresSettings(pool_pre_ping=False, connect_timeout_seconds=3.0)
    )

    assert captured["pool_pre_ping"] is False
    assert captured["connect_args"] == {"connect_timeout": 3, "sslmode": "prefer"}
