from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.student_auth_controller import start_student_challenge, verify_visual_password
from app.core.database import get_db
from app.models.student import VisualPasswordType
from app.schemas.student_auth import (
    StudentChallengeRequest,
    StudentChallengeResponse,
    StudentLoginRequest,
    StudentLoginResponse,
    VisualPasswordOptionOut,
)
from app.services.visual_password import options_for

router = APIRouter(prefix="/auth/student", tags=["Auth - Student"])


@router.get("/visual-password/options", response_model=list[VisualPasswordOptionOut])
async def list_visual_password_options(
    type: str = Query(..., description="animal | object | color_shape"),
):
    try:
        password_type = VisualPasswordType(type)
    except ValueError:
        raise HTTPException(status_code=400, detail="Unknown visual password type")
    return [VisualPasswordOptionOut.model_validate(o) for o in options_for(password_type)]


@router.post("/challenge", response_model=StudentChallengeResponse)
async def start_challenge(payload: StudentChallengeRequest, db: AsyncSession = Depends(get_db)):
    return await start_student_challenge(db, payload.student_id)


@router.post("/login", response_model=StudentLoginResponse)
async def student_login(
    payload: StudentLoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    return await verify_visual_password(payload, request, response, db)
