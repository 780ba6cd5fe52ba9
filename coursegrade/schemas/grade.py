from datetime import datetime

from pydantic import BaseModel

from coursegrade.schemas.user import ProfileBrief


class StudentGradeRead(BaseModel):
    user_id: int
    quiz_points: int
    max_quiz_points: int
    assignment_points: int
    max_assignment_points: int
    extra_points: int
    total_points: int
    max_possible_points: int
    updated_at: datetime

    class Config:
        from_attributes = True


class StudentGradeRow(StudentGradeRead):
    user: ProfileBrief


class ExtraPointsUpdate(BaseModel):
    # range is checked by the aggregator so the error carries a kind
    extra_points: int


class RecalculateAllResult(BaseModel):
    success: bool = True
    count: int
