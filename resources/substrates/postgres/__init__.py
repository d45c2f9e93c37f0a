"""Shared relational store substrate for Canteen services."""

from resources.substrates.postgres.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.substrates.postgres.config import (
    PostgresSettings,
    resolve_postgres_settings,
)
from resources.substrates.postgres.engine import (
    create_in_memory_engine,
    create_postgres_engine,
)
from resources.substrates.postgres.health import ping
from resources.substrates.postgres.session import (
    SessionProvider,
    create_session_factory,
    transactional_session,
)
from resources.substrates.postgres.substrate import (
    PostgresHealthStatus,
    PostgresSubstrate,
    SharedPostgresSubstrate,
)
from resources.substrates.postgres.upsert import upsert_statement

__all__ = [
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "PostgresHealthStatus",
    "PostgresSettings",
    "PostgresSubstrate",
    "SessionProvider",
    "SharedPostgresSubstrate",
    "create_in_memory_engine",
    "create_postgres_engine",
    "create_session_factory",
    "ping",
    "resolve_postgres_settings",
    "transactional_session",
    "upsert_statement",
]
