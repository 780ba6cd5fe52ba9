from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class QuizCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    grade: int = Field(ge=0)


class QuizRead(BaseModel):
    id: int
    title: str
    description: Optional[str]
    grade: int
    closed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class QuizResultCreate(BaseModel):
    score: int = Field(ge=0)
    total_questions: int = Field(gt=0)


class QuizResultRead(BaseModel):
    id: int
    quiz_id: int
    user_id: int
    score: int
    total_questions: int
    completed_at: datetime

    class Config:
        from_attributes = True
