from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import AuthError, InfrastructureFailure
from app.core.identity import Identity
from app.core.security import verify_password_async
from app.models.student import Student
from app.models.user import Role, User


@dataclass(frozen=True)
class LoginResult:
    identity: Optional[Identity] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.identity is not None


INVALID_CREDENTIALS = LoginResult(error=AuthError.INVALID_CREDENTIALS)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def find_by_email(db: AsyncSession, email: str) -> Optional[User]:
    try:
        result = await db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("find_by_email") from exc
    return result.scalar_one_or_none()


async def find_student(db: AsyncSession, student_id: uuid.UUID) -> Optional[Student]:
    """Student profile with its user row loaded (visual-password path only)."""
    try:
        result = await db.execute(
            select(Student)
            .options(selectinload(Student.user))
            .where(Student.id == student_id)
        )
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("find_student") from exc
    return result.scalar_one_or_none()


async def authenticate(db: AsyncSession, email: str, password: str) -> LoginResult:
    """
    Staff credential check.

    Missing user, missing hash (students), wrong password, student role and
    inactive account all produce the same INVALID_CREDENTIALS result so the
    response cannot be used to enumerate accounts. The bcrypt verify runs in
    every case so timing does not leak it either.
    """
    user = await find_by_email(db, email)

    password_ok = await verify_password_async(password, user.password_hash if user else None)

    if user is None or not password_ok:
        return INVALID_CREDENTIALS
    if user.role is Role.STUDENT or not user.active:
        return INVALID_CREDENTIALS

    return LoginResult(identity=Identity.from_user(user))


async def list_active_students(db: AsyncSession) -> list[Student]:
    """Active student accounts for the login picker, ordered by name."""
    try:
        result = await db.execute(
            select(Student)
            .join(Student.user)
            .options(selectinload(Student.user))
            .where(User.active.is_(True), User.role == Role.STUDENT)
            .order_by(User.first_name, User.last_name)
        )
    except SQLAlchemyError as exc:
        raise InfrastructureFailure("list_active_students") from exc
    return list(result.scalars().all())
