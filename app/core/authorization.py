from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from app.core.errors import AuthError
from app.core.identity import Identity
from app.models.user import Role

STAFF_ROLES = frozenset({Role.TEACHER, Role.ADMIN})
ADMIN_ONLY = frozenset({Role.ADMIN})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    identity: Optional[Identity] = None
    reason: Optional[AuthError] = None


def authorize(identity: Optional[Identity], required_roles: Iterable[Role]) -> Decision:
    """
    Pure allow/deny over (identity, role set). No I/O.

    Deny reasons stay distinct internally (UNAUTHORIZED vs FORBIDDEN);
    `decision_status` decides whether callers ever see the difference.
    """
    if identity is None or not identity.active:
        return Decision(allowed=False, reason=AuthError.UNAUTHORIZED)
    if identity.role not in frozenset(required_roles):
        return Decision(allowed=False, identity=identity, reason=AuthError.FORBIDDEN)
    return Decision(allowed=True, identity=identity)


def decision_status(decision: Decision, distinguish_forbidden: bool = False) -> int:
    """HTTP status for a deny. Without the policy flag every deny is a 401."""
    if decision.allowed:
        raise ValueError("decision_status() called on an allow decision")
    if distinguish_forbidden and decision.reason is AuthError.FORBIDDEN:
        return HTTP_403_FORBIDDEN
    return HTTP_401_UNAUTHORIZED
