"""Concrete Registration Store Service implementation."""

from __future__ import annotations

from datetime import date
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from packages.canteen_shared.business_day import (
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
    conflict_error,
    exception_to_error,
    validation_error,
)
from packages.canteen_shared.logging import fields, get_logger, public_api_instrumented
from services.action.realtime_fanout.domain import EVENT_DEPARTMENT
from services.action.realtime_fanout.service import RealtimeFanoutService
from services.state.lock_controller.service import LockControllerService
from services.state.registration_store.component import SERVICE_COMPONENT_ID
from services.state.registration_store.config import RegistrationStoreSettings
from services.state.registration_store.domain import (
    AuditEntry,
    HealthStatus,
    RegistrationRecord,
    RegistrationSummary,
)
from services.state.registration_store.interfaces import RegistrationRepository
from services.state.registration_store.service import RegistrationStoreService
from services.state.retention_purge.service import RetentionPurgeService

_LOGGER = get_logger(__name__)


class _CountsRequest(BaseModel):
    """Validate write counts before any side effect."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    regular_count: StrictInt = Field(ge=0)
    veg_count: StrictInt = Field(ge=0)


class DefaultRegistrationStoreService(RegistrationStoreService):
    """Registration records in one repository, gated by the Lock Controller."""

    def __init__(
        self,
        *,
        settings: RegistrationStoreSettings,
        repository: RegistrationRepository,
        locks: LockControllerService,
        fanout: RealtimeFanoutService,
        retention: RetentionPurgeService,
        clock: Clock = utc_clock,
        readiness: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._locks = locks
        self._fanout = fanout
        self._retention = retention
        self._clock = clock
        self._readiness = readiness

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("unit_id", "date"),
    )
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
        """Write counts, audit only real changes, then broadcast the record."""
        day, errors = self._validate_target(meta=meta, unit_id=unit_id, value=date)
        if not errors:
            errors = _validate_counts(regular_count=regular_count, veg_count=veg_count)
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        lock = self._locks.is_locked(meta=meta, date=day)
        if not lock.ok or lock.value is None:
            return failure(meta=meta, errors=list(lock.errors))
        if lock.value.locked:
            return failure(
                meta=meta,
                errors=[
                    conflict_error(
                        f"registration is locked for {day.isoformat()}",
                        code=codes.REGISTRATION_LOCKED,
                        metadata={
                            "date": day.isoformat(),
                            "reason": lock.value.reason or "",
                        },
                    )
                ],
            )

        return self._write(
            meta=meta,
            operation="set_registration",
            unit_id=unit_id.strip(),
            day=day,
            regular_count=regular_count,
            veg_count=veg_count,
            actor=actor,
            force_audit=False,
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("unit_id", "date"),
    )
    def get_registration(
        self, *, meta: EnvelopeMeta, date: date | str, unit_id: str
    ) -> Envelope[RegistrationRecord]:
        day, errors = self._validate_target(meta=meta, unit_id=unit_id, value=date)
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        try:
            record = self._repository.get_registration(unit_id=unit_id.strip(), day=day)
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(
                meta=meta, operation="get_registration", exc=exc
            )
        if record is None:
            record = RegistrationRecord.zero(unit_id=unit_id.strip(), day=day)
        return success(meta=meta, payload=record.normalized())

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("unit_id", "date"),
    )
    def clear_registration(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        unit_id: str,
        actor: str | None,
    ) -> Envelope[RegistrationRecord]:
        """Zero counts without consulting the lock; always appends an audit entry."""
        day, errors = self._validate_target(meta=meta, unit_id=unit_id, value=date)
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        return self._write(
            meta=meta,
            operation="clear_registration",
            unit_id=unit_id.strip(),
            day=day,
            regular_count=0,
            veg_count=0,
            actor=actor,
            force_audit=True,
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("unit_id", "limit"),
    )
    def list_history(
        self, *, meta: EnvelopeMeta, unit_id: str, limit: int | None = None
    ) -> Envelope[list[AuditEntry]]:
        errors = _validate_meta(meta) or _validate_unit(unit_id)
        resolved, limit_errors = self._resolve_limit(
            limit, default=self._settings.history_limit
        )
        errors = errors or limit_errors
        if errors:
            return failure(meta=meta, errors=errors)
        return self._list_audit(meta=meta, unit_id=unit_id.strip(), limit=resolved)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("limit",),
    )
    def list_all_history(
        self, *, meta: EnvelopeMeta, limit: int | None = None
    ) -> Envelope[list[AuditEntry]]:
        resolved, limit_errors = self._resolve_limit(
            limit, default=self._settings.audit_limit
        )
        errors = _validate_meta(meta) or limit_errors
        if errors:
            return failure(meta=meta, errors=errors)
        return self._list_audit(meta=meta, unit_id=None, limit=resolved)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("date",),
    )
    def summary_for_date(
        self, *, meta: EnvelopeMeta, date: date | str
    ) -> Envelope[RegistrationSummary]:
        """Sum normalized totals across units ordered by unit id."""
        errors = _validate_meta(meta)
        day, date_errors = _parse_date(date)
        errors = errors or date_errors
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None
        self._retention.purge_if_due(meta=meta)

        try:
            records = self._repository.list_for_date(day=day)
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(
                meta=meta, operation="summary_for_date", exc=exc
            )
        per_unit = [record.normalized() for record in records]
        return success(
            meta=meta,
            payload=RegistrationSummary(
                date=day,
                total_count=sum(record.total_count for record in per_unit),
                per_unit=per_unit,
            ),
        )

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

    def _write(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        unit_id: str,
        day: date,
        regular_count: int,
        veg_count: int,
        actor: str | None,
        force_audit: bool,
    ) -> Envelope[RegistrationRecord]:
        try:
            written = self._repository.write_registration(
                unit_id=unit_id,
                day=day,
                regular_count=regular_count,
                veg_count=veg_count,
                updated_by=actor or None,
                updated_at=self._clock(),
                force_audit=force_audit,
            )
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation=operation, exc=exc)

        record = written.record.normalized()
        _LOGGER.info(
            "Registration stored: audited=%s total=%s",
            written.audited,
            record.total_count,
            extra={fields.UNIT_ID: unit_id, fields.BUSINESS_DATE: day.isoformat()},
        )
        self._fanout.publish(
            meta=meta,
            date=day,
            event_type=EVENT_DEPARTMENT,
            body=record.model_dump(mode="json", by_alias=True),
        )
        return success(meta=meta, payload=record)

    def _list_audit(
        self, *, meta: EnvelopeMeta, unit_id: str | None, limit: int
    ) -> Envelope[list[AuditEntry]]:
        self._retention.purge_if_due(meta=meta)
        try:
            entries = self._repository.list_audit(unit_id=unit_id, limit=limit)
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="list_audit", exc=exc)
        return success(meta=meta, payload=[entry.normalized() for entry in entries])

    def _resolve_limit(
        self, limit: object, *, default: int
    ) -> tuple[int, list[ErrorDetail]]:
        if limit is None:
            return default, []
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            return default, [
                validation_error(
                    "limit: must be a positive integer", code=codes.INVALID_ARGUMENT
                )
            ]
        return min(limit, self._settings.max_history_limit), []

    def _validate_target(
        self, *, meta: EnvelopeMeta, unit_id: str, value: object
    ) -> tuple[date | None, list[ErrorDetail]]:
        errors = _validate_meta(meta) or _validate_unit(unit_id)
        if errors:
            return None, errors
        return _parse_date(value)

    def _dependency_failure(
        self, *, meta: EnvelopeMeta, operation: str, exc: Exception
    ) -> Envelope:
        _LOGGER.warning(
            "Registration store failure: operation=%s exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(meta=meta, errors=[exception_to_error(exc)])


def _validate_meta(meta: EnvelopeMeta) -> list[ErrorDetail]:
    try:
        validate_meta(meta)
    except ValueError as exc:
        return [validation_error(str(exc), code=codes.INVALID_ARGUMENT)]
    return []


def _validate_unit(unit_id: object) -> list[ErrorDetail]:
    if not isinstance(unit_id, str) or unit_id.strip() == "":
        return [
            validation_error("unit_id: is required", code=codes.MISSING_REQUIRED_FIELD)
        ]
    return []


def _validate_counts(*, regular_count: object, veg_count: object) -> list[ErrorDetail]:
    try:
        _CountsRequest.model_validate(
            {"regular_count": regular_count, "veg_count": veg_count}
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "counts"
        return [
            validation_error(
                f"{field}: {first.get('msg', 'invalid')}",
                code=codes.INVALID_ARGUMENT,
            )
        ]
    return []


def _parse_date(value: object) -> tuple[date | None, list[ErrorDetail]]:
    try:
        return parse_business_date(value), []
    except ValueError as exc:
        return None, [validation_error(f"date: {exc}", code=codes.INVALID_ARGUMENT)]
