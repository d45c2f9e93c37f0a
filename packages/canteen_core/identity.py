"""Header-based identity provider.

Credentials are verified upstream (gateway or auth proxy), which forwards the
resolved identity as request headers. This module only reads them.
"""

from __future__ import annotations

from typing import Mapping

from packages.canteen_shared.http import MissingHeaderError, get_header
from packages.canteen_shared.identity import Actor

USER_ID_HEADER = "X-User-Id"
USER_NAME_HEADER = "X-User-Name"
DEPARTMENT_HEADER = "X-Department"
ROLE_HEADER = "X-Role"


class HeaderIdentityProvider:
    """Resolve an ``Actor`` from forwarded identity headers."""

    def resolve(self, headers: Mapping[str, str]) -> Actor:
        """Return the caller identity; raises ``MissingHeaderError`` without a role."""
        role = get_header(headers, ROLE_HEADER)
        assert role is not None
        user_id = get_header(headers, USER_ID_HEADER, required=False)
        user_name = get_header(headers, USER_NAME_HEADER, required=False)
        return Actor(
            actor_id=user_id or user_name or "anonymous",
            actor_name=user_name or user_id or "anonymous",
            unit_id=get_header(headers, DEPARTMENT_HEADER, required=False),
            role=role.lower(),
        )


__all__ = ["HeaderIdentityProvider", "MissingHeaderError"]
