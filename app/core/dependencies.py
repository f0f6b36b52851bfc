from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import authorize, decision_status
from app.core.config import settings
from app.core.database import commit_or_fail, get_db
from app.core.identity import Identity, RequestContext
from app.models.user import Role
from app.services.session_service import resolve_session

_CONTEXT_ATTR = "auth_context"


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    """
    Resolve the session cookie once per request.

    The result is cached on request.state so every dependency and handler
    in the same request sees the same identity.
    """
    cached = getattr(request.state, _CONTEXT_ATTR, None)
    if cached is not None:
        return cached

    token = request.cookies.get(settings.SESSION_COOKIE_NAME) or None
    resolution = await resolve_session(db, token)
    # Persist lazy cleanup / last_activity_at even if the handler later 401s.
    await commit_or_fail(db, "resolve_session")

    context = RequestContext(token=token, resolution=resolution)
    setattr(request.state, _CONTEXT_ATTR, context)
    return context


async def get_current_identity(
    context: RequestContext = Depends(get_request_context),
) -> Optional[Identity]:
    return context.identity


def require_roles(*roles: Role):
    """
    Route guard factory:

        admin: Identity = Depends(require_roles(Role.ADMIN))
    """
    required = frozenset(roles)

    async def _guard(identity: Optional[Identity] = Depends(get_current_identity)) -> Identity:
        decision = authorize(identity, required)
        if not decision.allowed:
            status_code = decision_status(decision, settings.AUTH_DISTINGUISH_FORBIDDEN)
            raise HTTPException(
                status_code=status_code,
                detail="Unauthorized" if status_code == 401 else "Forbidden",
            )
        return decision.identity

    return _guard


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.TEACHER, Role.ADMIN)
