from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.auth_controller import get_me, login, logout
from app.core.database import get_db
from app.core.dependencies import get_current_identity, get_request_context
from app.core.identity import Identity, RequestContext
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse, MessageResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Staff Login",
    description="""
Authenticate a teacher or admin with email + password.
On success the `session-id` cookie is set (HttpOnly, SameSite=Lax, 7 days).

Failure is always `401 {"error": "Invalid credentials"}` — the response does
not reveal whether the email exists.
    """,
)
async def staff_login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    return await login(payload, request, response, db)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Deletes the current session if there is one and clears the cookie. Always 200.",
)
async def session_logout(
    response: Response,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    return await logout(context, response, db)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get Current User",
    description="Returns the identity bound to the session cookie, or 401.",
)
async def me(
    identity: Optional[Identity] = Depends(get_current_identity),
) -> MeResponse:
    return await get_me(identity)
