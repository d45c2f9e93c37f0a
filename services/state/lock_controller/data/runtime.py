"""Lock Controller store wiring over the shared relational substrate."""

from __future__ import annotations

from dataclasses import dataclass

from resources.substrates.postgres import PostgresSubstrate
from services.state.lock_controller.data.repository import SqlLockRepository
from services.state.lock_controller.data.schema import metadata


@dataclass(frozen=True)
class LockDataRuntime:
    """Owned SQL repository plus the substrate used for health probes."""

    substrate: PostgresSubstrate
    repository: SqlLockRepository

    @classmethod
    def from_substrate(cls, substrate: PostgresSubstrate) -> "LockDataRuntime":
        """Ensure owned tables exist (when enabled) and build the repository."""
        substrate.ensure_schema(metadata)
        return cls(
            substrate=substrate, repository=SqlLockRepository(substrate.sessions)
        )

    def is_healthy(self) -> bool:
        return self.substrate.health().ready
