from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from coursegrade.core.config import DEFAULT_TASK_MAX_POINTS
from coursegrade.schemas.task import TaskGradeRead


class GradeTaskRequest(BaseModel):
    task_id: int
    student_id: int
    points: int
    max_points: int = DEFAULT_TASK_MAX_POINTS
    feedback: Optional[str] = None


class UpdateGradeRequest(BaseModel):
    points: int
    max_points: int
    feedback: Optional[str] = None


class AppealCreate(BaseModel):
    requested_points: int
    reason: Optional[str] = None


class AppealRead(BaseModel):
    id: int
    task_id: int
    student_id: int
    requested_points: int
    reason: Optional[str] = None
    status: str
    admin_response: Optional[str] = None
    resolved_points: Optional[int] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResolveAppealRequest(BaseModel):
    task_id: int
    student_id: int
    points: int
    max_points: Optional[int] = None
    feedback: Optional[str] = None
    admin_response: Optional[str] = None


class ResolveAppealResult(BaseModel):
    appeal: AppealRead
    grade: TaskGradeRead
    task_status: str


class GradingStats(BaseModel):
    total_tasks: int
    graded_tasks: int
    pending_tasks: int
    total_grades: int
    average_score: float
    completion_rate: float
    status_counts: dict[str, int]


class StudentPerformanceRow(BaseModel):
    student_id: int
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    total_points: int
    tasks_graded: int
    average_points: float


class TaskGradeLine(BaseModel):
    task_id: int
    task_title: str
    points: int
    max_points: int
    feedback: Optional[str] = None
    graded_at: datetime


class StudentGroupSummary(BaseModel):
    student_id: int
    group_id: int
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    total_points: int
    total_max_points: int
    graded_task_count: int
    task_grades: list[TaskGradeLine]
