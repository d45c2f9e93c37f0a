"""Business-day rules: active date, automatic lock window and purge gate.

Everything here is a pure function of a wall-clock ``now`` and a calendar
date. Nothing is cached, so the effective lock can never drift from the
clock.

Naive ``now`` values are read as local wall-clock time in the policy
timezone; aware values are converted into it first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from packages.canteen_shared.config import BusinessDaySettings

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    """Return the current aware UTC timestamp."""
    return datetime.now(UTC)


def parse_business_date(value: object) -> date:
    """Parse one business date from a date, datetime or ``YYYY-MM-DD`` string.

    An ISO timestamp string is truncated to its date part. Raises
    ``ValueError`` for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("date must be a YYYY-MM-DD string")
    candidate = value.strip().split("T", 1)[0]
    if len(candidate) != 10:
        raise ValueError(f"invalid date: {value!r}")
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        raise ValueError(f"invalid date: {value!r}") from None


@dataclass(frozen=True)
class BusinessDayPolicy:
    """Wall-clock policy for one deployment."""

    timezone: str = "UTC"
    lock_window_start_hour: int = 9
    rollover_hour: int = 12

    def __post_init__(self) -> None:
        if not 0 <= self.lock_window_start_hour < self.rollover_hour <= 23:
            raise ValueError("lock window must open before the rollover hour")

    @classmethod
    def from_settings(cls, settings: BusinessDaySettings) -> "BusinessDayPolicy":
        return cls(
            timezone=settings.timezone,
            lock_window_start_hour=settings.lock_window_start_hour,
            rollover_hour=settings.rollover_hour,
        )

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def local(self, now: datetime) -> datetime:
        """Return ``now`` as an aware datetime in the policy timezone."""
        if now.tzinfo is None:
            return now.replace(tzinfo=self.zone)
        return now.astimezone(self.zone)

    def active_date(self, now: datetime) -> date:
        """Return today, or tomorrow once the rollover hour has been reached."""
        local_now = self.local(now)
        if local_now.hour >= self.rollover_hour:
            return local_now.date() + timedelta(days=1)
        return local_now.date()

    def automatic_lock_window(self, day: date) -> tuple[datetime, datetime]:
        """Return the aware ``[start, end)`` automatic lock interval for ``day``."""
        start = datetime.combine(
            day, time(hour=self.lock_window_start_hour), tzinfo=self.zone
        )
        end = datetime.combine(day, time(hour=self.rollover_hour), tzinfo=self.zone)
        return start, end

    def is_automatically_locked(self, day: date, now: datetime) -> bool:
        """Only the current calendar day can be time-locked."""
        local_now = self.local(now)
        if local_now.date() != day:
            return False
        start, end = self.automatic_lock_window(day)
        return start <= local_now < end

    def purge_due(self, now: datetime) -> bool:
        """Purging runs from the rollover hour until midnight."""
        return self.local(now).hour >= self.rollover_hour
