import logging
import uuid

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.identity import Identity
from app.schemas.student import (
    RosterResponse,
    RosterStudent,
    UnlockResponse,
    VisualPasswordOut,
    VisualPasswordUpdate,
)
from app.services.attempt_tracker import clear_lockout
from app.services.credentials import find_student, list_active_students
from app.services.visual_password import VisualPasswordSpec, is_configured, validate_spec

logger = logging.getLogger(__name__)


async def _get_student_or_404(db: AsyncSession, student_id: uuid.UUID):
    student = await find_student(db, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


async def set_visual_password(
    db: AsyncSession,
    student_id: uuid.UUID,
    payload: VisualPasswordUpdate,
    editor: Identity,
) -> VisualPasswordOut:
    student = await _get_student_or_404(db, student_id)

    try:
        data = validate_spec(payload.type, payload.data)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    student.visual_password_type = payload.type
    student.visual_password_data = data
    # Old challenges were built against the previous answer.
    await clear_lockout(db, student.id)
    await db.flush()

    logger.info("Visual password updated student=%s by=%s", student.id, editor.id)
    return VisualPasswordOut(
        student_id=str(student.id),
        type=student.visual_password_type.value,
        configured=is_configured(VisualPasswordSpec.from_student(student)),
    )


async def unlock_visual_password(
    db: AsyncSession,
    student_id: uuid.UUID,
    editor: Identity,
) -> UnlockResponse:
    student = await _get_student_or_404(db, student_id)
    cleared = await clear_lockout(db, student.id)
    logger.info("Visual password lockout cleared student=%s by=%s", student.id, editor.id)
    return UnlockResponse(student_id=str(student.id), cleared_challenges=cleared)


async def list_login_roster(db: AsyncSession) -> RosterResponse:
    students = await list_active_students(db)
    return RosterResponse(
        students=[
            RosterStudent(
                id=str(s.id),
                first_name=s.user.first_name,
                last_name=s.user.last_name,
                grade_level=s.grade_level,
                visual_password_type=s.visual_password_type,
            )
            for s in students
        ]
    )
