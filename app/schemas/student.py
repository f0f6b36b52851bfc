from typing import Optional

from pydantic import BaseModel, Field

from app.models.student import VisualPasswordType


class VisualPasswordUpdate(BaseModel):
    """
    Teacher/admin edit of a student's visual password.

    data examples:
      {"type": "animal", "data": {"animal": "cat"}}
      {"type": "color_shape", "data": {"color": "red", "shape": "circle"}}
    """
    type: VisualPasswordType
    data: dict[str, str] = Field(default_factory=dict)


class VisualPasswordOut(BaseModel):
    student_id: str
    type: Optional[str]
    configured: bool


class UnlockResponse(BaseModel):
    student_id: str
    cleared_challenges: int


class RosterStudent(BaseModel):
    """
    One entry of the public login picker.
    visual_password_data is the answer and is never part of this model.
    """
    id: str
    first_name: str
    last_name: str
    grade_level: Optional[int] = None
    visual_password_type: Optional[VisualPasswordType] = None


class RosterResponse(BaseModel):
    students: list[RosterStudent]
