from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.student import Student


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VisualPasswordChallenge(Base):
    """
    Server-side attempt counter for one student login challenge.

    A challenge is open while expires_at is in the future and completed_at is
    NULL. locked_at is set when wrong_attempts reaches the configured maximum;
    a locked challenge blocks new challenges for the same student until it
    expires or a teacher clears it.
    """
    __tablename__ = "visual_password_challenges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # random challenge id
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("students.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    wrong_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    locked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    student: Mapped["Student"] = relationship(back_populates="challenges")
