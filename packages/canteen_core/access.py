"""Role authorization table and the single gate every route passes through."""

from __future__ import annotations

from typing import Mapping

from packages.canteen_shared.errors import ErrorDetail, codes, policy_error
from packages.canteen_shared.http import MissingHeaderError
from packages.canteen_shared.identity import (
    ROLE_ADMIN,
    ROLE_KITCHEN,
    ROLE_MANAGER,
    Actor,
    RequestAuthorizer,
)
from packages.canteen_shared.logging import fields, get_logger
from packages.canteen_core.identity import HeaderIdentityProvider

_LOGGER = get_logger(__name__)

_READERS = frozenset({ROLE_MANAGER, ROLE_ADMIN, ROLE_KITCHEN})
_WRITERS = frozenset({ROLE_MANAGER, ROLE_ADMIN})
_ADMINS = frozenset({ROLE_ADMIN})

OPERATION_ROLES: Mapping[str, frozenset[str]] = {
    "summary": _READERS,
    "set_registration": _WRITERS,
    "get_registration": _READERS,
    "list_history": _WRITERS,
    "list_all_history": _ADMINS,
    "clear_registration": _ADMINS,
    "set_lock": _ADMINS,
    "get_lock": _READERS,
    "subscribe_date": _READERS,
}


def authorize(operation: str, actor: Actor) -> list[ErrorDetail]:
    """Return a policy error unless ``actor.role`` may run ``operation``."""
    allowed = OPERATION_ROLES.get(operation)
    if allowed is None:
        return [
            policy_error(
                f"unknown operation: {operation}", code=codes.PERMISSION_DENIED
            )
        ]
    if actor.role not in allowed:
        return [
            policy_error(
                "role not allowed",
                code=codes.PERMISSION_DENIED,
                metadata={"operation": operation, "role": actor.role},
            )
        ]
    return []


class RoleTableAuthorizer(RequestAuthorizer):
    """Resolve identity from headers and check it against ``OPERATION_ROLES``."""

    def __init__(self, *, identity: HeaderIdentityProvider | None = None) -> None:
        self._identity = identity or HeaderIdentityProvider()

    def authorize_request(
        self, *, headers: Mapping[str, str], operation: str
    ) -> tuple[Actor | None, list[ErrorDetail]]:
        try:
            actor = self._identity.resolve(headers)
        except MissingHeaderError as exc:
            return None, [policy_error(str(exc), code=codes.UNAUTHENTICATED)]
        errors = authorize(operation, actor)
        if errors:
            _LOGGER.info(
                "Request denied: operation=%s",
                operation,
                extra={fields.ROLE: actor.role, fields.PRINCIPAL: actor.actor_id},
            )
            return None, errors
        return actor, []

    def authorize_unit(self, *, actor: Actor, unit_id: str) -> list[ErrorDetail]:
        """Only admins may act on a unit other than their own."""
        if actor.is_admin or unit_id == actor.unit_id:
            return []
        return [
            policy_error(
                "cannot act on another unit",
                code=codes.PERMISSION_DENIED,
                metadata={"unit_id": unit_id},
            )
        ]
