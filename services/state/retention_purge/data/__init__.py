"""Data-layer exports for Retention Purge Service."""

from services.state.retention_purge.data.repository import (
    InMemoryPurgeRepository,
    SqlPurgeRepository,
)

__all__ = ["InMemoryPurgeRepository", "SqlPurgeRepository"]
