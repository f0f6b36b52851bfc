from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

from sqlalchemy import JSON, DateTime, Enum as SAEnum, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.visual_password_challenge import VisualPasswordChallenge


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --------------------------------------------------
# ENUM
# --------------------------------------------------

class VisualPasswordType(str, Enum):
    ANIMAL = "animal"
    OBJECT = "object"
    COLOR_SHAPE = "color_shape"


# --------------------------------------------------
# MODEL
# --------------------------------------------------

class Student(Base):
    """
    Student profile, sharing its primary key with the owning `users` row.

    visual_password_data shape depends on visual_password_type:
      animal       → {"animal": "cat"}
      object       → {"object": "ball"}
      color_shape  → {"color": "red", "shape": "circle"}
    """
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    grade_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    visual_password_type: Mapped[Optional[VisualPasswordType]] = mapped_column(
        SAEnum(
            VisualPasswordType,
            name="visual_password_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=True,
    )
    visual_password_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Written each time a login challenge is requested; the write doubles as
    # the per-student lock around challenge creation.
    last_challenge_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # --------------------------------------------------
    # RELATIONSHIPS
    # --------------------------------------------------

    user: Mapped["User"] = relationship(back_populates="student")

    challenges: Mapped[list["VisualPasswordChallenge"]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        kind = self.visual_password_type.value if self.visual_password_type else None
        return f"<Student id={self.id} visual_password_type={kind}>"
