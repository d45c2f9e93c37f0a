"""Registration Store wiring over the shared relational substrate."""

from __future__ import annotations

from dataclasses import dataclass

from resources.substrates.postgres import PostgresSubstrate
from services.state.registration_store.data.repository import (
    SqlRegistrationRepository,
)
from services.state.registration_store.data.schema import metadata


@dataclass(frozen=True)
class RegistrationDataRuntime:
    """Owned SQL repository plus the substrate used for health probes."""

    substrate: PostgresSubstrate
    repository: SqlRegistrationRepository

    @classmethod
    def from_substrate(
        cls, substrate: PostgresSubstrate
    ) -> "RegistrationDataRuntime":
        """Ensure owned tables exist (when enabled) and build the repository."""
        substrate.ensure_schema(metadata)
        return cls(
            substrate=substrate,
            repository=SqlRegistrationRepository(substrate.sessions),
        )

    def is_healthy(self) -> bool:
        return self.substrate.health().ready
