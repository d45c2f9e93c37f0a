"""Authoritative in-process Python API for Retention Purge Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from packages.canteen_shared.business_day import Clock, utc_clock
from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import PostgresSubstrate
from services.state.retention_purge.domain import HealthStatus, PurgeReport


class RetentionPurgeService(ABC):
    """Public API for dropping registration and lock rows of past dates."""

    @abstractmethod
    def purge_if_due(self, *, meta: EnvelopeMeta) -> Envelope[PurgeReport]:
        """Purge rows dated before the active date when the clock allows it."""

    @abstractmethod
    def purge_before(
        self, *, meta: EnvelopeMeta, cutoff: date | str
    ) -> Envelope[PurgeReport]:
        """Purge rows dated strictly before ``cutoff`` unconditionally."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return purge settings state and relational store readiness."""


def build_retention_purge_service(
    *,
    settings: CanteenSettings,
    postgres: PostgresSubstrate,
    clock: Clock = utc_clock,
) -> RetentionPurgeService:
    """Build the default purge service over the shared relational substrate."""
    from packages.canteen_shared.business_day import BusinessDayPolicy
    from services.state.retention_purge.config import (
        resolve_retention_purge_settings,
    )
    from services.state.retention_purge.data import SqlPurgeRepository
    from services.state.retention_purge.implementation import (
        DefaultRetentionPurgeService,
    )

    return DefaultRetentionPurgeService(
        settings=resolve_retention_purge_settings(settings),
        policy=BusinessDayPolicy.from_settings(settings.business_day),
        repository=SqlPurgeRepository(postgres.sessions),
        clock=clock,
        readiness=lambda: postgres.health().ready,
    )
