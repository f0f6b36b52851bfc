import logging
import uuid

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.identity import Identity
from app.models.user import User
from app.schemas.admin import SweepResponse, UserActiveResponse
from app.services.attempt_tracker import sweep_challenges
from app.services.session_service import delete_user_sessions, sweep_expired

logger = logging.getLogger(__name__)


async def set_user_active(
    db: AsyncSession,
    user_id: uuid.UUID,
    active: bool,
    admin: Identity,
) -> UserActiveResponse:
    """
    Toggle a user's active flag.

    Deactivation alone already stops the user's sessions from resolving;
    the rows are also deleted here so they do not wait for a sweep.
    """
    if user_id == admin.id and not active:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    user.active = active
    revoked = 0
    if not active:
        revoked = await delete_user_sessions(db, user.id)
    await db.flush()

    logger.info("User %s active=%s by admin=%s (revoked %d sessions)", user.id, active, admin.id, revoked)
    return UserActiveResponse(id=str(user.id), active=user.active, revoked_sessions=revoked)


async def sweep(db: AsyncSession) -> SweepResponse:
    sessions = await sweep_expired(db)
    challenges = await sweep_challenges(db)
    return SweepResponse(expired_sessions=sessions, expired_challenges=challenges)
