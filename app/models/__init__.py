# Import every model so relationship() string targets resolve no matter
# which one a caller imports first.
from app.models.user import Role, User
from app.models.student import Student, VisualPasswordType
from app.models.session import AuthSession
from app.models.visual_password_challenge import VisualPasswordChallenge

__all__ = [
    "AuthSession",
    "Role",
    "Student",
    "User",
    "VisualPasswordChallenge",
    "VisualPasswordType",
]
