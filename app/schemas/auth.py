from pydantic import BaseModel, EmailStr, Field


# ── Request Body ──────────────────────────────────────────────────────
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "teacher@example.com",
                "password": "YourPassword123",
            }
        }
    }


# ── Response Bodies ───────────────────────────────────────────────────
class UserInfo(BaseModel):
    """
    Safe identity summary sent to the frontend.
    password_hash and visual password data are never included here.
    """
    id: str
    email: str | None
    role: str
    first_name: str
    last_name: str
    display_name: str


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserInfo


class MeResponse(BaseModel):
    user: UserInfo


class MessageResponse(BaseModel):
    message: str
