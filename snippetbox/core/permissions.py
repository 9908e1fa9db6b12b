"""Authorization preconditions.

The auth collaborator computes an AuthContext once per request and passes
it in; nothing here reads global or ambient state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from snippetbox.core.errors import AuthenticationRequired, PermissionDenied

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthContext:
    """Caller identity and privilege, supplied by the auth collaborator."""

    identity: Optional[str] = None
    is_admin: bool = False


def can_modify(auth: AuthContext, owner: Optional[str]) -> bool:
    """Edit/delete is permitted iff admin or the caller owns the record."""
    if auth.is_admin:
        return True
    return auth.identity is not None and auth.identity == owner


def require_identity(auth: AuthContext, action: str) -> str:
    """Return the caller identity or raise AuthenticationRequired."""
    if not auth.identity:
        logger.warning("permission_denied", action=action, reason="anonymous")
        raise AuthenticationRequired(action)
    return auth.identity


def require_modify(auth: AuthContext, owner: Optional[str], action: str) -> None:
    """Raise PermissionDenied unless can_modify() holds."""
    if not can_modify(auth, owner):
        logger.warning(
            "permission_denied",
            action=action,
            identity=auth.identity,
            owner=owner,
        )
        raise PermissionDenied(action)


def require_admin(auth: AuthContext, action: str) -> None:
    if not auth.is_admin:
        logger.warning("permission_denied", action=action, identity=auth.identity, reason="admin_only")
        raise PermissionDenied(action)
