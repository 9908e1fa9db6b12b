"""Auth-context dependency.

Identity arrives in a header set by the authenticating gateway. Admin
privilege is decided here, once per request, and passed into the core as
a plain boolean.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from snippetbox.config import Settings
from snippetbox.core.permissions import AuthContext

IDENTITY_HEADER = "X-User-Identity"


class AdminPolicy:
    """Decides whether an identity is privileged.

    Matches an explicit email allow-list or an email domain suffix,
    case-insensitively.
    """

    def __init__(self, emails: list[str], domains: list[str]) -> None:
        self._emails = {email.lower() for email in emails}
        self._domains = tuple(domain.lower() for domain in domains)

    @classmethod
    def from_settings(cls, settings: Settings) -> AdminPolicy:
        return cls(settings.admin_email_list, settings.admin_domain_list)

    def is_admin(self, identity: Optional[str]) -> bool:
        if not identity:
            return False
        lowered = identity.lower()
        return lowered in self._emails or any(lowered.endswith(d) for d in self._domains)

    def context_for(self, identity: Optional[str]) -> AuthContext:
        identity = (identity or "").strip() or None
        return AuthContext(identity=identity, is_admin=self.is_admin(identity))


def get_auth_context(request: Request) -> AuthContext:
    """FastAPI dependency returning the caller's AuthContext."""
    policy: AdminPolicy = request.app.state.app_state.admin_policy
    return policy.context_for(request.headers.get(IDENTITY_HEADER))
