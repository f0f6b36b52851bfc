from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from app.models.user import Role

if TYPE_CHECKING:
    from app.models.user import User
    from app.services.session_service import SessionResolution


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, detached from any DB session."""
    id: uuid.UUID
    role: Role
    first_name: str
    last_name: str
    email: Optional[str] = None
    active: bool = True

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_user(cls, user: "User") -> "Identity":
        return cls(
            id=user.id,
            role=user.role,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            active=bool(user.active),
        )

    def summary(self) -> dict:
        """Public shape returned by login / me endpoints."""
        return {
            "id": str(self.id),
            "email": self.email,
            "role": self.role.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "display_name": self.display_name,
        }


@dataclass(frozen=True)
class RequestContext:
    """
    Resolved once per request and passed to handlers explicitly.
    `token` is whatever the cookie carried, valid or not.
    """
    token: Optional[str]
    resolution: Optional["SessionResolution"]

    @property
    def identity(self) -> Optional[Identity]:
        return self.resolution.identity if self.resolution else None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None
