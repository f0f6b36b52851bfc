from pydantic import BaseModel


class UserActiveUpdate(BaseModel):
    active: bool


class UserActiveResponse(BaseModel):
    id: str
    active: bool
    revoked_sessions: int


class SweepResponse(BaseModel):
    expired_sessions: int
    expired_challenges: int
