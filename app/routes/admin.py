import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.admin_controller import set_user_active, sweep
from app.core.database import get_db
from app.core.dependencies import require_admin
from app.core.identity import Identity
from app.schemas.admin import SweepResponse, UserActiveResponse, UserActiveUpdate

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.patch("/users/{user_id}/active", response_model=UserActiveResponse)
async def update_user_active(
    user_id: uuid.UUID,
    payload: UserActiveUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    return await set_user_active(db, user_id, payload.active, admin)


@router.post(
    "/sessions/sweep",
    response_model=SweepResponse,
    summary="Sweep expired sessions",
    description="Deletes expired session rows and expired visual-password challenges.",
)
async def sweep_sessions(
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    return await sweep(db)
