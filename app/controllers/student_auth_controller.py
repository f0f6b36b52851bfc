import logging
import uuid

from fastapi import HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import commit_or_fail
from app.core.identity import Identity
from app.core.session_cookie import client_metadata, set_session_cookie
from app.models.student import Student
from app.models.user import Role
from app.schemas.auth import UserInfo
from app.schemas.student_auth import (
    StudentChallengeResponse,
    StudentLoginRequest,
    StudentLoginResponse,
    VisualPasswordOptionOut,
)
from app.services.attempt_tracker import (
    AttemptState,
    challenge_ttl_seconds,
    issue_challenge_token,
    load_challenge,
    start_challenge,
    submit_guess,
    tracker_for,
)
from app.services.credentials import find_student
from app.services.session_service import create_session
from app.services.visual_password import (
    VisualPasswordSpec,
    is_configured,
    matches,
    options_for,
    prompt_for,
)

logger = logging.getLogger(__name__)

LOCKED_MESSAGE = "Too many incorrect attempts. Please ask your teacher for help."


def _locked_out() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={"error": LOCKED_MESSAGE, "attempts_remaining": 0},
    )


async def _load_login_student(db: AsyncSession, student_id: uuid.UUID) -> Student:
    student = await find_student(db, student_id)
    if (
        student is None
        or student.user is None
        or student.user.role is not Role.STUDENT
        or not student.user.active
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid student login",
        )
    if not is_configured(VisualPasswordSpec.from_student(student)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Visual password not set up. Please ask your teacher for help.",
        )
    return student


async def start_student_challenge(db: AsyncSession, student_id: uuid.UUID) -> StudentChallengeResponse:
    """
    Step 1 of a student login: present the picture options.

    Re-selecting the same student resumes the open challenge, so the
    wrong-guess counter survives reloads.
    """
    student = await _load_login_student(db, student_id)

    challenge = await start_challenge(db, student.id)
    await commit_or_fail(db, "start_challenge")

    tracker = tracker_for(challenge)
    if tracker.state is AttemptState.LOCKED:
        raise _locked_out()

    password_type = student.visual_password_type
    return StudentChallengeResponse(
        challenge_token=issue_challenge_token(challenge),
        type=password_type.value,
        prompt=prompt_for(password_type),
        options=[VisualPasswordOptionOut.model_validate(o) for o in options_for(password_type)],
        attempts_remaining=tracker.attempts_remaining,
        expires_in=challenge_ttl_seconds(),
    )


async def verify_visual_password(
    payload: StudentLoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession,
) -> StudentLoginResponse:
    """Step 2: check one guess against the challenge, issue a session on success."""
    student = await _load_login_student(db, payload.student_id)

    challenge = await load_challenge(db, payload.challenge_token, student.id)
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Login challenge expired. Please pick your name again.",
        )

    matched = matches(VisualPasswordSpec.from_student(student), payload.visual_password)
    outcome = await submit_guess(db, challenge, matched)
    # Commit the counter before any error response rolls the request back.
    await commit_or_fail(db, "submit_guess")

    if outcome.state is AttemptState.LOCKED:
        raise _locked_out()

    if not outcome.accepted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Login challenge expired. Please pick your name again.",
        )

    if outcome.state is not AttemptState.SUCCESS:
        remaining = outcome.attempts_remaining
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": f"That's not right. Try again! ({remaining} attempts left)",
                "attempts_remaining": remaining,
            },
        )

    identity = Identity.from_user(student.user)
    ip_address, user_agent = client_metadata(request)
    token = await create_session(db, identity.id, ip_address=ip_address, user_agent=user_agent)
    await commit_or_fail(db, "student_login")

    set_session_cookie(response, token)
    logger.info("Student login user=%s", identity.id)
    return StudentLoginResponse(user=UserInfo(**identity.summary()))
