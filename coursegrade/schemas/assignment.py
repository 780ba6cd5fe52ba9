from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    due_at: Optional[datetime] = None
    grade: int = Field(ge=0)


class AssignmentRead(BaseModel):
    id: int
    title: str
    description: Optional[str]
    due_at: Optional[datetime]
    grade: int
    closed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionCreate(BaseModel):
    content: Optional[str] = None


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    user_id: int
    content: Optional[str]
    submitted_at: datetime
    grade: Optional[int] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmissionGradeUpdate(BaseModel):
    grade: int
    feedback: Optional[str] = None
