"""Actor identity and the request-authorization contract used by HTTP routes.

Credential verification happens outside the engine. Routes only ever see an
``Actor`` resolved by the runtime's identity provider, and ask the injected
``RequestAuthorizer`` whether that actor may run one named operation.
"""

from __future__ import annotations

from typing import Mapping, Protocol

from pydantic import BaseModel, ConfigDict

from packages.canteen_shared.errors import ErrorDetail

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_KITCHEN = "kitchen"


class Actor(BaseModel):
    """Identity of the caller behind one request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str
    actor_name: str
    unit_id: str | None = None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class RequestAuthorizer(Protocol):
    """Resolve and authorize the actor behind one inbound request."""

    def authorize_request(
        self, *, headers: Mapping[str, str], operation: str
    ) -> tuple[Actor | None, list[ErrorDetail]]:
        """Return the permitted actor, or errors when identity or role fail."""

    def authorize_unit(self, *, actor: Actor, unit_id: str) -> list[ErrorDetail]:
        """Return errors when ``actor`` may not act on ``unit_id``."""
