"""Concrete Retention Purge Service implementation."""

from __future__ import annotations

from datetime import date
from typing import Callable

from packages.canteen_shared.business_day import (
    BusinessDayPolicy,
    Clock,
    parse_business_date,
    utc_clock,
)
from packages.canteen_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.canteen_shared.errors import codes, exception_to_error, validation_error
from packages.canteen_shared.logging import fields, get_logger, public_api_instrumented
from services.state.retention_purge.component import SERVICE_COMPONENT_ID
from services.state.retention_purge.config import RetentionPurgeSettings
from services.state.retention_purge.domain import HealthStatus, PurgeReport
from services.state.retention_purge.interfaces import PurgeRepository
from services.state.retention_purge.service import RetentionPurgeService

_LOGGER = get_logger(__name__)


class DefaultRetentionPurgeService(RetentionPurgeService):
    """Clock-gated purge over one repository."""

    def __init__(
        self,
        *,
        settings: RetentionPurgeSettings,
        policy: BusinessDayPolicy,
        repository: PurgeRepository,
        clock: Clock = utc_clock,
        readiness: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings
        self._policy = policy
        self._repository = repository
        self._clock = clock
        self._readiness = readiness

    @public_api_instrumented(logger=_LOGGER, component_id=str(SERVICE_COMPONENT_ID))
    def purge_if_due(self, *, meta: EnvelopeMeta) -> Envelope[PurgeReport]:
        """Run only from the rollover hour on; the cutoff is the active date."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(
                meta=meta,
                errors=[validation_error(str(exc), code=codes.INVALID_ARGUMENT)],
            )
        now = self._clock()
        if not self._settings.enabled or not self._policy.purge_due(now):
            return success(meta=meta, payload=PurgeReport(ran=False))
        return self._purge(meta=meta, cutoff=self._policy.active_date(now))

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("cutoff",),
    )
    def purge_before(
        self, *, meta: EnvelopeMeta, cutoff: date | str
    ) -> Envelope[PurgeReport]:
        try:
            validate_meta(meta)
            day = parse_business_date(cutoff)
        except ValueError as exc:
            return failure(
                meta=meta,
                errors=[
                    validation_error(f"cutoff: {exc}", code=codes.INVALID_ARGUMENT)
                ],
            )
        return self._purge(meta=meta, cutoff=day)

    @public_api_instrumented(logger=_LOGGER, component_id=str(SERVICE_COMPONENT_ID))
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        substrate_ready = True
        detail = "ok"
        if self._readiness is not None:
            try:
                substrate_ready = self._readiness()
            except Exception as exc:  # noqa: BLE001
                substrate_ready = False
                detail = f"store probe failed: {type(exc).__name__}"
            else:
                detail = "ok" if substrate_ready else "store not ready"
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                substrate_ready=substrate_ready,
                enabled=self._settings.enabled,
                detail=detail,
            ),
        )

    def _purge(self, *, meta: EnvelopeMeta, cutoff: date) -> Envelope[PurgeReport]:
        try:
            deleted = self._repository.delete_dated_before(cutoff=cutoff)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "Retention purge failed: cutoff=%s exception_type=%s",
                cutoff.isoformat(),
                type(exc).__name__,
                exc_info=exc,
            )
            return failure(meta=meta, errors=[exception_to_error(exc)])

        if deleted.total:
            _LOGGER.info(
                "Retention purge removed rows: registrations=%s audit_entries=%s "
                "locks=%s",
                deleted.registrations,
                deleted.audit_entries,
                deleted.locks,
                extra={fields.BUSINESS_DATE: cutoff.isoformat()},
            )
        return success(
            meta=meta, payload=PurgeReport(ran=True, cutoff=cutoff, deleted=deleted)
        )
