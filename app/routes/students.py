import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.student_controller import list_login_roster, set_visual_password, unlock_visual_password
from app.core.database import get_db
from app.core.dependencies import require_staff
from app.core.identity import Identity
from app.schemas.student import RosterResponse, UnlockResponse, VisualPasswordOut, VisualPasswordUpdate

# ─────────────────────────────────────────────────────────────
# TEACHER / ADMIN ROUTES
# ─────────────────────────────────────────────────────────────
router = APIRouter(prefix="/students", tags=["Students - Visual Password"])


@router.put("/{student_id}/visual-password", response_model=VisualPasswordOut)
async def update_visual_password(
    student_id: uuid.UUID,
    payload: VisualPasswordUpdate,
    db: AsyncSession = Depends(get_db),
    editor: Identity = Depends(require_staff),
):
    return await set_visual_password(db, student_id, payload, editor)


@router.post("/{student_id}/visual-password/unlock", response_model=UnlockResponse)
async def unlock_student(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    editor: Identity = Depends(require_staff),
):
    return await unlock_visual_password(db, student_id, editor)


# ─────────────────────────────────────────────────────────────
# PUBLIC ROUTE (login picker)
# ─────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=RosterResponse,
    summary="Student Login Roster",
    description="Active students for the picture-password login picker. No password data is returned.",
)
async def login_roster(db: AsyncSession = Depends(get_db)):
    return await list_login_roster(db)
