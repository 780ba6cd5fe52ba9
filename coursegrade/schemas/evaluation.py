from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from coursegrade.schemas.user import ProfileBrief


class EvaluationUpsert(BaseModel):
    group_id: int
    user_id: int

    week1_score: Optional[int] = None
    week1_feedback: Optional[str] = None
    week1_github_contributions: Optional[int] = None
    week1_tasks_completed: Optional[int] = None

    week2_score: Optional[int] = None
    week2_feedback: Optional[str] = None
    week2_github_contributions: Optional[int] = None
    week2_tasks_completed: Optional[int] = None

    week3_score: Optional[int] = None
    week3_feedback: Optional[str] = None
    week3_github_contributions: Optional[int] = None
    week3_tasks_completed: Optional[int] = None

    week4_score: Optional[int] = None
    week4_feedback: Optional[str] = None
    week4_github_contributions: Optional[int] = None
    week4_tasks_completed: Optional[int] = None

    feedback: Optional[str] = None

    def weekly_data(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude={"group_id", "user_id"}, exclude_unset=True)


class WeeklyBreakdown(BaseModel):
    week: int
    score: int
    max_score: int
    feedback: Optional[str] = None
    github_contributions: int
    tasks_completed: int


class GroupBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class EvaluationRead(BaseModel):
    id: int
    group_id: int
    user_id: int
    evaluator_id: Optional[int] = None
    total_score: int
    max_score: int
    feedback: Optional[str] = None
    updated_at: datetime
    student: ProfileBrief
    group: GroupBrief
    evaluator: Optional[ProfileBrief] = None
    weekly_breakdown: list[WeeklyBreakdown]


class WeeklyAverages(BaseModel):
    week1: int
    week2: int
    week3: int
    week4: int


class EvaluationSummary(BaseModel):
    total_students: int
    distinct_students: int
    evaluated_students: int
    average_score: int
    weekly_averages: WeeklyAverages


class StudentForEvaluation(BaseModel):
    user_id: int
    group_id: int
    group_name: str
    student_name: Optional[str] = None
    student_email: str
    student_avatar: Optional[str] = None
    has_evaluation: bool
