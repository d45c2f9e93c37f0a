"""Authoritative in-process Python API for Lock Controller Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from packages.canteen_shared.business_day import Clock, utc_clock
from packages.canteen_shared.config import CanteenSettings
from packages.canteen_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import PostgresSubstrate
from services.action.realtime_fanout.service import RealtimeFanoutService
from services.state.lock_controller.domain import (
    HealthStatus,
    LockEvaluation,
    LockState,
)
from services.state.retention_purge.service import RetentionPurgeService


class LockControllerService(ABC):
    """Public API for per-date registration locks."""

    @abstractmethod
    def is_locked(
        self, *, meta: EnvelopeMeta, date: date | str
    ) -> Envelope[LockEvaluation]:
        """Return whether writes to ``date`` are refused, and why."""

    @abstractmethod
    def set_lock(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        locked: bool,
        actor: str | None,
    ) -> Envelope[LockState]:
        """Set or clear the administrative flag and broadcast the new state."""

    @abstractmethod
    def get_lock(self, *, meta: EnvelopeMeta, date: date | str) -> Envelope[LockState]:
        """Return the stored flag merged with the automatic window."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return Lock Controller and relational store readiness."""


def build_lock_controller_service(
    *,
    settings: CanteenSettings,
    postgres: PostgresSubstrate,
    fanout: RealtimeFanoutService,
    retention: RetentionPurgeService,
    clock: Clock = utc_clock,
) -> LockControllerService:
    """Build the default Lock Controller over the shared relational substrate."""
    from packages.canteen_shared.business_day import BusinessDayPolicy
    from services.state.lock_controller.config import (
        resolve_lock_controller_settings,
    )
    from services.state.lock_controller.data import LockDataRuntime
    from services.state.lock_controller.implementation import (
        DefaultLockControllerService,
    )

    runtime = LockDataRuntime.from_substrate(postgres)
    return DefaultLockControllerService(
        settings=resolve_lock_controller_settings(settings),
        policy=BusinessDayPolicy.from_settings(settings.business_day),
        repository=runtime.repository,
        fanout=fanout,
        retention=retention,
        clock=clock,
        readiness=runtime.is_healthy,
    )
