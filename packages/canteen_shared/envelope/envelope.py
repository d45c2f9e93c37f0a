"""Typed envelope returned by every public service method."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from packages.canteen_shared.errors import ErrorDetail

from .meta import EnvelopeMeta

T = TypeVar("T")


class Payload(BaseModel, Generic[T]):
    """Wrapper keeping ``None`` payloads distinct from a missing payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: T


class Envelope(BaseModel, Generic[T]):
    """Metadata, optional payload and zero or more errors.

    Routes render ``value`` on success and ``errors`` otherwise; services never
    populate both.
    """

    model_config = ConfigDict(frozen=True)

    metadata: EnvelopeMeta
    payload: Payload[T] | None
    errors: list[ErrorDetail] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def value(self) -> T | None:
        """Return the unwrapped payload value, or ``None``."""
        return None if self.payload is None else self.payload.value

    @property
    def first_error(self) -> ErrorDetail | None:
        return self.errors[0] if self.errors else None
