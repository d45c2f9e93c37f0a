"""Shared relational store substrate contract and implementation."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Engine, MetaData

from packages.canteen_shared.logging import get_logger
from resources.substrates.postgres.config import PostgresSettings
from resources.substrates.postgres.engine import (
    create_in_memory_engine,
    create_postgres_engine,
)
from resources.substrates.postgres.health import ping
from resources.substrates.postgres.session import SessionProvider

_LOGGER = get_logger(__name__)


class PostgresHealthStatus(BaseModel):
    """Relational store readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str


class PostgresSubstrate(Protocol):
    """Protocol for shared relational store access."""

    @property
    def engine(self) -> Engine:
        """Return underlying SQLAlchemy engine."""

    @property
    def sessions(self) -> SessionProvider:
        """Return the transactional session provider."""

    def ensure_schema(self, metadata: MetaData) -> None:
        """Create one owner's tables when schema bootstrap is enabled."""

    def health(self) -> PostgresHealthStatus:
        """Probe store readiness."""


class SharedPostgresSubstrate(PostgresSubstrate):
    """Concrete relational substrate with schema bootstrap and readiness probe."""

    def __init__(
        self,
        *,
        settings: PostgresSettings,
        engine: Engine | None = None,
    ) -> None:
        self._settings = settings
        self._engine = engine or create_postgres_engine(settings)
        self._sessions = SessionProvider.for_engine(self._engine)

    @classmethod
    def in_memory(cls, *, settings: PostgresSettings) -> "SharedPostgresSubstrate":
        """Build a process-local SQLite substrate that always creates its schema."""
        return cls(
            settings=settings.model_copy(update={"create_schema": True}),
            engine=create_in_memory_engine(),
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def sessions(self) -> SessionProvider:
        return self._sessions

    def ensure_schema(self, metadata: MetaData) -> None:
        if not self._settings.create_schema:
            return
        metadata.create_all(self._engine, checkfirst=True)
        _LOGGER.info(
            "Schema ensured: tables=%s",
            ",".join(sorted(metadata.tables)),
        )

    def health(self) -> PostgresHealthStatus:
        """Return readiness from a bounded ping."""
        timeout = self._settings.health_timeout_seconds
        with self._sessions.exclusive():
            ready = ping(self._engine, timeout_seconds=timeout)
        return PostgresHealthStatus(
            ready=ready,
            detail="ok" if ready else "database ping failed",
        )
