"""
Session issuing, resolution and cleanup.

States a presented token can be in:

    NO_SESSION   no token, or token not in the store
    EXPIRED      expires_at <= now      → row deleted on this lookup
    ORPHANED     owner missing/inactive → row left for the sweep
    VALID        everything checks out  → Identity returned

Every failure resolves to "unauthenticated"; callers only branch on
`resolution.identity`.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import AuthError, InfrastructureFailure
from app.core.identity import Identity
from app.core.security import generate_session_token
from app.models.session import AuthSession
from app.models.user import User

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NO_SESSION = "no_session"
    VALID = "valid"
    EXPIRED = "expired"
    ORPHANED = "orphaned"


@dataclass(frozen=True)
class SessionResolution:
    state: SessionState
    identity: Optional[Identity] = None
    error: Optional[AuthError] = None

    @property
    def is_valid(self) -> bool:
        return self.state is SessionState.VALID


NO_SESSION = SessionResolution(SessionState.NO_SESSION, error=AuthError.SESSION_NOT_FOUND)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def session_expiry(now: datetime | None = None) -> datetime:
    return (now or utcnow()) + timedelta(days=settings.SESSION_TTL_DAYS)


async def create_session(
    db: AsyncSession,
    user_id: uuid.UUID,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> str:
    """Insert a fresh session row for `user_id` and return its token."""
    now = utcnow()
    token = generate_session_token()
    row = AuthSession(
        id=token,
        user_id=user_id,
        expires_at=session_expiry(now),
        created_at=now,
        updated_at=now,
        last_activity_at=now,
        ip_address=ip_address[:255] if ip_address else None,
        user_agent=user_agent[:500] if user_agent else None,
    )
    try:
        db.add(row)
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("create_session") from exc
    return token


async def resolve_session(db: AsyncSession, token: str | None) -> SessionResolution:
    if not token:
        return NO_SESSION

    try:
        row = await db.get(AuthSession, token)
        if row is None:
            return NO_SESSION

        now = utcnow()
        if as_utc(row.expires_at) <= now:
            # lazy cleanup
            await db.execute(delete(AuthSession).where(AuthSession.id == token))
            await db.flush()
            return SessionResolution(SessionState.EXPIRED, error=AuthError.SESSION_EXPIRED)

        user = await db.get(User, row.user_id)
        if user is None or not user.active:
            return SessionResolution(SessionState.ORPHANED, error=AuthError.SESSION_ORPHANED)

        row.last_activity_at = now
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("resolve_session") from exc

    return SessionResolution(SessionState.VALID, identity=Identity.from_user(user))


async def delete_session(db: AsyncSession, token: str | None) -> None:
    """Idempotent: unknown or empty tokens are not an error."""
    if not token:
        return
    try:
        await db.execute(delete(AuthSession).where(AuthSession.id == token))
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("delete_session") from exc


async def delete_user_sessions(db: AsyncSession, user_id: uuid.UUID) -> int:
    try:
        result = await db.execute(delete(AuthSession).where(AuthSession.user_id == user_id))
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("delete_user_sessions") from exc
    return result.rowcount or 0


async def sweep_expired(db: AsyncSession, now: datetime | None = None) -> int:
    """Delete every session that has already expired. Returns rows removed."""
    try:
        result = await db.execute(
            delete(AuthSession).where(AuthSession.expires_at < (now or utcnow()))
        )
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("sweep_expired") from exc
    removed = result.rowcount or 0
    if removed:
        logger.info("Swept %d expired sessions", removed)
    return removed


async def count_user_sessions(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(select(AuthSession.id).where(AuthSession.user_id == user_id))
    return len(result.scalars().all())
