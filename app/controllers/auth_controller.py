import logging

from fastapi import HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import commit_or_fail
from app.core.identity import Identity, RequestContext
from app.core.session_cookie import clear_session_cookie, client_metadata, set_session_cookie
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse, MessageResponse, UserInfo
from app.services.credentials import authenticate
from app.services.session_service import create_session, delete_session

logger = logging.getLogger(__name__)


async def login(payload: LoginRequest, request: Request, response: Response, db: AsyncSession) -> LoginResponse:
    """
    Staff login — all business logic lives here, not in the route.

    Security measures:
    ─────────────────
    1. authenticate() always runs a bcrypt verify, even for unknown emails
       → no timing signal for whether an email exists

    2. One error for unknown email, wrong password, student account and
       inactive account
       → no account enumeration

    3. The session token is only ever placed in an HttpOnly cookie
       → not readable from page scripts
    """
    result = await authenticate(db, str(payload.email), payload.password)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    identity = result.identity
    ip_address, user_agent = client_metadata(request)
    token = await create_session(db, identity.id, ip_address=ip_address, user_agent=user_agent)
    await commit_or_fail(db, "login")

    set_session_cookie(response, token)
    logger.info("Staff login user=%s role=%s", identity.id, identity.role.value)
    return LoginResponse(user=UserInfo(**identity.summary()))


async def logout(context: RequestContext, response: Response, db: AsyncSession) -> MessageResponse:
    """Always succeeds. Deletes the presented session (if any) and clears the cookie."""
    if context.token:
        await delete_session(db, context.token)
        await commit_or_fail(db, "logout")
        if context.is_authenticated:
            logger.info("Logout user=%s", context.identity.id)
    clear_session_cookie(response)
    return MessageResponse(message="Logout successful")


async def get_me(identity: Identity | None) -> MeResponse:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return MeResponse(user=UserInfo(**identity.summary()))
