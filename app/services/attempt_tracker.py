"""
Attempt tracking for visual-password logins.

AttemptTracker is the pure state machine:

    PRESENTING ──wrong──▶ RETRY(n) ──wrong, n+1 >= max──▶ LOCKED
        │                    │
        └──────right─────────┴──▶ SUCCESS

The rest of the module keeps that state server-side in
`visual_password_challenges`. A student has at most one open challenge, so
a page reload or re-selecting the student resumes the same counter instead
of starting from zero. Guesses are recorded with conditional UPDATEs;
parallel requests cannot push the counter past the limit.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import AuthError, InfrastructureFailure
from app.core.security import generate_challenge_id
from app.models.student import Student
from app.models.visual_password_challenge import VisualPasswordChallenge
from app.services.session_service import as_utc, utcnow

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    PRESENTING = "presenting"
    RETRY = "retry"
    LOCKED = "locked"
    SUCCESS = "success"


@dataclass(frozen=True)
class GuessOutcome:
    state: AttemptState
    attempts_remaining: int
    accepted: bool = True  # False → guess arrived after LOCKED/SUCCESS and was ignored

    @property
    def error(self) -> Optional[AuthError]:
        if self.state is AttemptState.SUCCESS and self.accepted:
            return None
        if self.state is AttemptState.LOCKED:
            return AuthError.LOCKED_OUT
        if not self.accepted:
            return AuthError.CHALLENGE_INVALID
        return AuthError.WRONG_SELECTION


@dataclass
class AttemptTracker:
    max_attempts: int = 3
    wrong_guesses: int = 0
    completed: bool = False

    @property
    def state(self) -> AttemptState:
        if self.completed:
            return AttemptState.SUCCESS
        if self.wrong_guesses >= self.max_attempts:
            return AttemptState.LOCKED
        if self.wrong_guesses == 0:
            return AttemptState.PRESENTING
        return AttemptState.RETRY

    @property
    def attempts_remaining(self) -> int:
        if self.completed:
            return 0
        return max(self.max_attempts - self.wrong_guesses, 0)

    def submit(self, matched: bool) -> GuessOutcome:
        if self.state in (AttemptState.LOCKED, AttemptState.SUCCESS):
            return GuessOutcome(self.state, self.attempts_remaining, accepted=False)
        if matched:
            self.completed = True
        else:
            self.wrong_guesses += 1
        return GuessOutcome(self.state, self.attempts_remaining)


# ── Challenge tokens ──────────────────────────────────────────────────

def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=settings.SECRET_KEY, salt="visual-password-challenge")


def challenge_ttl_seconds() -> int:
    return settings.VISUAL_PASSWORD_CHALLENGE_MINUTES * 60


def issue_challenge_token(challenge: VisualPasswordChallenge) -> str:
    return _serializer().dumps({"cid": challenge.id, "sid": str(challenge.student_id)})


def read_challenge_token(token: str, student_id: uuid.UUID) -> Optional[str]:
    """Challenge id carried by `token`, or None if forged, stale or for another student."""
    try:
        payload = _serializer().loads(token, max_age=challenge_ttl_seconds())
    except (SignatureExpired, BadSignature):
        return None
    if not isinstance(payload, dict) or payload.get("sid") != str(student_id):
        return None
    cid = payload.get("cid")
    return cid if isinstance(cid, str) else None


# ── Persistence ───────────────────────────────────────────────────────

def tracker_for(challenge: VisualPasswordChallenge) -> AttemptTracker:
    return AttemptTracker(
        max_attempts=settings.VISUAL_PASSWORD_MAX_ATTEMPTS,
        wrong_guesses=challenge.wrong_attempts or 0,
        completed=challenge.completed_at is not None,
    )


def is_open(challenge: VisualPasswordChallenge, now: datetime | None = None) -> bool:
    return challenge.completed_at is None and as_utc(challenge.expires_at) > (now or utcnow())


async def open_challenge_for(db: AsyncSession, student_id: uuid.UUID) -> Optional[VisualPasswordChallenge]:
    result = await db.execute(
        select(VisualPasswordChallenge)
        .where(VisualPasswordChallenge.student_id == student_id)
        .where(VisualPasswordChallenge.completed_at.is_(None))
        .order_by(VisualPasswordChallenge.created_at.desc())
        .execution_options(populate_existing=True)
    )
    now = utcnow()
    for challenge in result.scalars():
        if is_open(challenge, now):
            return challenge
    return None


async def _lock_student(db: AsyncSession, student_id: uuid.UUID, now: datetime) -> None:
    """
    Write to the student row before looking for an open challenge.

    The write holds a row lock (Postgres) or the database write lock
    (SQLite) until commit, so concurrent challenge requests for one student
    run one after another and all see the same open challenge.
    """
    await db.execute(
        update(Student)
        .where(Student.id == student_id)
        .values(last_challenge_at=now)
        .execution_options(synchronize_session=False)
    )


async def start_challenge(db: AsyncSession, student_id: uuid.UUID) -> VisualPasswordChallenge:
    """
    Resume the student's open challenge, or create one.

    A student has at most one open challenge. A locked challenge is
    returned as-is; callers check `tracker_for(...)`.
    """
    now = utcnow()
    try:
        await _lock_student(db, student_id, now)
        challenge = await open_challenge_for(db, student_id)
        if challenge is not None:
            return challenge

        challenge = VisualPasswordChallenge(
            id=generate_challenge_id(),
            student_id=student_id,
            wrong_attempts=0,
            expires_at=now + timedelta(seconds=challenge_ttl_seconds()),
            created_at=now,
        )
        db.add(challenge)
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("start_challenge") from exc
    return challenge


async def load_challenge(
    db: AsyncSession, token: str, student_id: uuid.UUID
) -> Optional[VisualPasswordChallenge]:
    challenge_id = read_challenge_token(token, student_id)
    if challenge_id is None:
        return None
    try:
        challenge = await db.get(VisualPasswordChallenge, challenge_id)
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("load_challenge") from exc
    if challenge is None or challenge.student_id != student_id or not is_open(challenge):
        return None
    return challenge


def _record_guess(challenge_id: str, matched: bool, max_attempts: int, now: datetime):
    """
    One conditional UPDATE per guess. It only matches while the challenge is
    still open, so concurrent guesses can never record more than
    `max_attempts` wrong answers or complete a locked challenge.
    """
    vpc = VisualPasswordChallenge
    stmt = update(vpc).where(
        vpc.id == challenge_id,
        vpc.completed_at.is_(None),
        vpc.wrong_attempts < max_attempts,
    )
    if matched:
        stmt = stmt.values(completed_at=now)
    else:
        stmt = stmt.values(
            wrong_attempts=vpc.wrong_attempts + 1,
            locked_at=case((vpc.wrong_attempts + 1 >= max_attempts, now), else_=vpc.locked_at),
        )
    return stmt.returning(vpc.wrong_attempts).execution_options(synchronize_session=False)


async def submit_guess(db: AsyncSession, challenge: VisualPasswordChallenge, matched: bool) -> GuessOutcome:
    """Apply one guess to a persisted challenge. The database row decides the outcome."""
    outcome = tracker_for(challenge).submit(matched)
    if not outcome.accepted:
        return outcome

    max_attempts = settings.VISUAL_PASSWORD_MAX_ATTEMPTS
    try:
        result = await db.execute(_record_guess(challenge.id, matched, max_attempts, utcnow()))
        wrong_attempts = result.scalar_one_or_none()
        current = await db.get(VisualPasswordChallenge, challenge.id, populate_existing=True)
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("submit_guess") from exc

    if wrong_attempts is None:
        # Another request locked or completed the challenge first, or staff
        # cleared it in the meantime.
        latest = tracker_for(current or challenge)
        return GuessOutcome(latest.state, latest.attempts_remaining, accepted=False)

    recorded = AttemptTracker(max_attempts=max_attempts, wrong_guesses=wrong_attempts, completed=matched)
    if recorded.state is AttemptState.LOCKED:
        logger.info("Visual password locked for student %s", challenge.student_id)
    return GuessOutcome(recorded.state, recorded.attempts_remaining)


async def clear_lockout(db: AsyncSession, student_id: uuid.UUID) -> int:
    try:
        result = await db.execute(
            delete(VisualPasswordChallenge).where(VisualPasswordChallenge.student_id == student_id)
        )
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("clear_lockout") from exc
    return result.rowcount or 0


async def sweep_challenges(db: AsyncSession, now: datetime | None = None) -> int:
    try:
        result = await db.execute(
            delete(VisualPasswordChallenge).where(VisualPasswordChallenge.expires_at < (now or utcnow()))
        )
        await db.flush()
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("sweep_challenges") from exc
    return result.rowcount or 0
