import uuid

from pydantic import BaseModel, Field

from app.schemas.auth import UserInfo


class VisualPasswordOptionOut(BaseModel):
    id: str
    label: str
    glyph: str

    model_config = {"from_attributes": True}


class StudentChallengeRequest(BaseModel):
    student_id: uuid.UUID


class StudentChallengeResponse(BaseModel):
    challenge_token: str
    type: str
    prompt: str
    options: list[VisualPasswordOptionOut]
    attempts_remaining: int
    expires_in: int  # seconds


class StudentLoginRequest(BaseModel):
    student_id: uuid.UUID
    challenge_token: str = Field(..., min_length=1)
    visual_password: str = Field(..., min_length=1, max_length=64)


class StudentLoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserInfo
