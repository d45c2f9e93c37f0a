"""Concrete Realtime Fan-out Service implementation."""

from __future__ import annotations

from datetime import date
from typing import Mapping

from packages.canteen_shared.business_day import parse_business_date
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
    dependency_error,
    validation_error,
)
from packages.canteen_shared.logging import fields, get_logger, public_api_instrumented
from services.action.realtime_fanout.component import SERVICE_COMPONENT_ID
from services.action.realtime_fanout.config import RealtimeFanoutSettings
from services.action.realtime_fanout.domain import (
    HealthStatus,
    PublishReceipt,
    SubscriptionInfo,
    channel_name,
    encode_event,
)
from services.action.realtime_fanout.hub import RealtimeHub
from services.action.realtime_fanout.interfaces import FanoutTransport, Subscriber
from services.action.realtime_fanout.service import RealtimeFanoutService

_LOGGER = get_logger(__name__)


class DefaultRealtimeFanoutService(RealtimeFanoutService):
    """Fan-out over a local hub and an injected transport."""

    def __init__(
        self,
        *,
        settings: RealtimeFanoutSettings,
        hub: RealtimeHub,
        transport: FanoutTransport,
    ) -> None:
        self._settings = settings
        self._hub = hub
        self._transport = transport

    @property
    def settings(self) -> RealtimeFanoutSettings:
        return self._settings

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("date", "event_type"),
    )
    def publish(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        event_type: str,
        body: Mapping[str, object],
    ) -> Envelope[PublishReceipt]:
        """Publish one event; transport failures are reported, never raised."""
        day, errors = self._validate_date(meta=meta, value=date)
        if not errors and event_type.strip() == "":
            errors = [
                validation_error(
                    "event_type: must be non-empty", code=codes.INVALID_ARGUMENT
                )
            ]
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None

        channel = channel_name(self._settings.channel_prefix, day)
        try:
            delivered = self._transport.publish(
                channel=channel, message=encode_event(event_type, body)
            )
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "Fan-out publish failed: channel=%s exception_type=%s",
                channel,
                type(exc).__name__,
                exc_info=exc,
            )
            return failure(
                meta=meta,
                errors=[
                    dependency_error(
                        "publish failed",
                        code=codes.DEPENDENCY_UNAVAILABLE,
                        metadata={
                            "backplane": self._transport.name,
                            "exception_type": type(exc).__name__,
                        },
                    )
                ],
            )

        return success(
            meta=meta,
            payload=PublishReceipt(
                channel=channel, date=day, event_type=event_type, delivered=delivered
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("date",),
    )
    def subscribe(
        self,
        *,
        meta: EnvelopeMeta,
        date: date | str,
        subscriber: Subscriber,
    ) -> Envelope[SubscriptionInfo]:
        """Join one subscriber to the date's channel."""
        day, errors = self._validate_date(meta=meta, value=date)
        if errors:
            return failure(meta=meta, errors=errors)
        assert day is not None

        channel = channel_name(self._settings.channel_prefix, day)
        self._hub.subscribe(channel=channel, subscriber=subscriber)
        _LOGGER.debug("Subscriber joined", extra={fields.CHANNEL: channel})
        return success(meta=meta, payload=SubscriptionInfo(channel=channel, date=day))

    def unsubscribe(self, *, subscriber: Subscriber) -> int:
        return self._hub.unsubscribe(subscriber=subscriber)

    @public_api_instrumented(logger=_LOGGER, component_id=str(SERVICE_COMPONENT_ID))
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return fan-out readiness including the backplane."""
        try:
            backplane_ready = self._transport.is_ready()
        except Exception as exc:  # noqa: BLE001
            backplane_ready = False
            detail = f"backplane probe failed: {type(exc).__name__}"
        else:
            detail = "ok" if backplane_ready else "backplane not ready"
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                backplane=self._transport.name,
                backplane_ready=backplane_ready,
                subscribers=self._hub.subscriber_count(),
                detail=detail,
            ),
        )

    def close(self) -> None:
        self._transport.close()

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
