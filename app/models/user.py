from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.session import AuthSession
    from app.models.student import Student


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --------------------------------------------------
# ENUM
# --------------------------------------------------

class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


# --------------------------------------------------
# MODEL
# --------------------------------------------------

class User(Base):
    """
    Every account on the platform: staff and students alike.

    Columns:
      id             UUID — opaque primary key
      email          TEXT — unique login email; NULL for students
      password_hash  TEXT — bcrypt hash; NULL for students (visual password instead)
      role           ENUM — student / teacher / admin
      active         BOOL — False = account disabled, sessions stop resolving
      first_name     TEXT
      last_name      TEXT
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, index=True, nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # --------------------------------------------------
    # RELATIONSHIPS
    # --------------------------------------------------

    sessions: Mapped[list["AuthSession"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    student: Mapped[Optional["Student"]] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role.value} active={self.active}>"
