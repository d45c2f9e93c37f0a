"""Authoritative in-process Python API for Registration Store Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from packages.canteen_shared.business_day import Clock, utc_clock
from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import PostgresSubstrate
from services.action.realtime_fanout.service import RealtimeFanoutService
from services.state.lock_controller.service import LockControllerService
from services.state.registration_store.domain import (
    AuditEntry,
    HealthStatus,
    RegistrationRecord,
    RegistrationSummary,
)
from services.state.retention_purge.service import RetentionPurgeService


class RegistrationStoreService(ABC):
    """Public API for per-unit daily meal registrations."""

    @abstractmethod
    def set_registration(
        self,
        *,
        meta: EnvelopeMeta,
        unit_id: str,
        date: date | str,
        regular_count: int,
        veg_count: int,
        actor: str | None,
    ) -> Envelope[RegistrationRecord]:
        """Upsert one unit's counts unless the date is locked."""

    @abstractmethod
    def get_registration(
        self, *, meta: EnvelopeMeta, date: date | str, unit_id: str
    ) -> Envelope[RegistrationRecord]:
        """Return one unit's counts, or a zero record when none exist."""

    @abstractmethod
    def clear_registration(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        unit_id: str,
        actor: str | None,
    ) -> Envelope[RegistrationRecord]:
        """Zero one unit's counts regardless of the lock."""

    @abstractmethod
    def list_history(
        self, *, meta: EnvelopeMeta, unit_id: str, limit: int | None = None
    ) -> Envelope[list[AuditEntry]]:
        """Return one unit's newest audit entries."""

    @abstractmethod
    def list_all_history(
        self, *, meta: EnvelopeMeta, limit: int | None = None
    ) -> Envelope[list[AuditEntry]]:
        """Return the newest audit entries across all units."""

    @abstractmethod
    def summary_for_date(
        self, *, meta: EnvelopeMeta, date: date | str
    ) -> Envelope[RegistrationSummary]:
        """Return every unit's counts for one date and their total."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return Registration Store and relational store readiness."""


def build_registration_store_service(
    *,
    settings: CanteenSettings,
    postgres: PostgresSubstrate,
    locks: LockControllerService,
    fanout: RealtimeFanoutService,
    retention: RetentionPurgeService,
    clock: Clock = utc_clock,
) -> RegistrationStoreService:
    """Build the default Registration Store over the shared relational substrate."""
    from services.state.registration_store.config import (
        resolve_registration_store_settings,
    )
    from services.state.registration_store.data import RegistrationDataRuntime
    from services.state.registration_store.implementation import (
        DefaultRegistrationStoreService,
    )

    runtime = RegistrationDataRuntime.from_substrate(postgres)
    return DefaultRegistrationStoreService(
        settings=resolve_registration_store_settings(settings),
        repository=runtime.repository,
        locks=locks,
        fanout=fanout,
        retention=retention,
        clock=clock,
        readiness=runtime.is_healthy,
    )
