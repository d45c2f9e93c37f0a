"""SQLAlchemy engine construction for the relational store."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from resources.substrates.postgres.config import PostgresSettings

IN_MEMORY_URL = "sqlite+pysqlite://"


def create_postgres_engine(settings: PostgresSettings) -> Engine:
    """Construct a pooled psycopg engine from substrate settings."""
    return create_engine(
        settings.url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout_seconds,
        pool_pre_ping=settings.pool_pre_ping,
        connect_args={
            "connect_timeout": int(settings.connect_timeout_seconds),
            "sslmode": settings.sslmode,
        },
    )


def create_in_memory_engine() -> Engine:
    """Construct one process-local SQLite engine shared by every connection."""
    return create_engine(
        IN_MEMORY_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
