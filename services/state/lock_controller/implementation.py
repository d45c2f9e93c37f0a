"""Concrete Lock Controller Service implementation."""

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
from packages.canteen_shared.errors import (
    ErrorDetail,
    codes,
    exception_to_error,
    validation_error,
)
from packages.canteen_shared.logging import fields, get_logger, public_api_instrumented
from services.action.realtime_fanout.domain import EVENT_LOCK
from services.action.realtime_fanout.service import RealtimeFanoutService
from services.state.lock_controller.component import SERVICE_COMPONENT_ID
from services.state.lock_controller.config import LockControllerSettings
from services.state.lock_controller.domain import (
    HealthStatus,
    LockEvaluation,
    LockRecord,
    LockState,
)
from services.state.lock_controller.interfaces import LockRepository
from services.state.lock_controller.service import LockControllerService
from services.state.retention_purge.service import RetentionPurgeService

_LOGGER = get_logger(__name__)


class DefaultLockControllerService(LockControllerService):
    """Lock flags in one repository, merged with the business-day window."""

    def __init__(
        self,
        *,
        settings: LockControllerSettings,
        policy: BusinessDayPolicy,
        repository: LockRepository,
        fanout: RealtimeFanoutService,
        retention: RetentionPurgeService,
        clock: Clock = utc_clock,
        readiness: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings
        self._policy = policy
        self._repository = repository
        self._fanout = fanout
        self._retention = retention
        self._clock = clock
        self._readiness = readiness

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("date",),
    )
    def is_locked(
        self, *, meta: EnvelopeMeta, date: date | str
    ) -> Envelope[LockEvaluation]:
        day, errors = self._validate_date(meta=meta, value=date)
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        try:
            record = self._repository.get_lock(day=day)
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="is_locked", exc=exc)

        manual = record is not None and record.locked
        automatic = self._policy.is_automatically_locked(day, self._clock())
        reason = "manual" if manual else "automatic" if automatic else None
        return success(
            meta=meta,
            payload=LockEvaluation(date=day, locked=manual or automatic, reason=reason),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("date", "locked"),
    )
    def set_lock(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        locked: bool,
        actor: str | None,
    ) -> Envelope[LockState]:
        """Stamp ``lockedAt``/``lockedBy`` when locking and clear them otherwise."""
        day, errors = self._validate_date(meta=meta, value=date)
        if not errors and not isinstance(locked, bool):
            errors = [
                validation_error(
                    "locked: must be a boolean", code=codes.INVALID_ARGUMENT
                )
            ]
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        now = self._clock()
        try:
            record = self._repository.upsert_lock(
                day=day,
                locked=locked,
                locked_at=now if locked else None,
                locked_by=(actor or None) if locked else None,
                updated_at=now,
            )
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="set_lock", exc=exc)

        state = LockState(
            date=record.date,
            locked=record.locked,
            locked_at=record.locked_at,
            locked_by=record.locked_by,
        )
        _LOGGER.info(
            "Lock flag set: locked=%s",
            state.locked,
            extra={fields.BUSINESS_DATE: day.isoformat()},
        )
        self._fanout.publish(
            meta=meta,
            date=day,
            event_type=EVENT_LOCK,
            body=state.model_dump(mode="json", by_alias=True),
        )
        return success(meta=meta, payload=state)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("date",),
    )
    def get_lock(self, *, meta: EnvelopeMeta, date: date | str) -> Envelope[LockState]:
        """Report the effective lock; an automatic lock is attributed to the system."""
        day, errors = self._validate_date(meta=meta, value=date)
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        try:
            record = self._repository.get_lock(day=day)
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="get_lock", exc=exc)
        return success(meta=meta, payload=self._merge(day, record))

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
                service_ready=True, substrate_ready=substrate_ready, detail=detail
            ),
        )

    def _merge(self, day: date, record: LockRecord | None) -> LockState:
        automatic = self._policy.is_automatically_locked(day, self._clock())
        window_start = self._policy.automatic_lock_window(day)[0] if automatic else None
        system_actor = self._settings.system_actor if automatic else None
        if record is None:
            return LockState(
                date=day,
                locked=automatic,
                locked_at=window_start,
                locked_by=system_actor,
            )
        return LockState(
            date=day,
            locked=record.locked or automatic,
            locked_at=record.locked_at or window_start,
            locked_by=record.locked_by or system_actor,
        )

    def _validate_date(
        self, *, meta: EnvelopeMeta, value: object
    ) -> tuple[date | None, list[ErrorDetail]]:
        try:
            validate_meta(meta)
        except ValueError as exc:
            return None, [validation_error(str(exc), code=codes.INVALID_ARGUMENT)]
        try:
            return parse_business_date(value), []
        except ValueError as exc:
            return None, [validation_error(f"date: {exc}", code=codes.INVALID_ARGUMENT)]

    def _dependency_failure(
        self, *, meta: EnvelopeMeta, operation: str, exc: Exception
    ) -> Envelope:
        _LOGGER.warning(
            "Lock store failure: operation=%s exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(meta=meta, errors=[exception_to_error(exc)])
