from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from coursegrade.schemas.user import ProfileBrief


# priority/status stay plain strings: the task service rejects bad values
# with an invalid_input error instead of a 422
class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    commit_link: Optional[str] = None
    merge_request_link: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[int] = None
    assignee_ids: list[int] = []


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    commit_link: Optional[str] = None
    merge_request_link: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[int] = None


class TaskStatusUpdate(BaseModel):
    status: str


class TaskAssign(BaseModel):
    assignee_ids: list[int]


class TaskAssigneeRead(BaseModel):
    user: ProfileBrief
    assigned_at: datetime
    assigned_by: Optional[ProfileBrief] = None

    class Config:
        from_attributes = True


class TaskGradeRead(BaseModel):
    id: int
    task_id: int
    student_id: int
    grader_id: Optional[int] = None
    points: int
    max_points: int
    feedback: Optional[str] = None
    graded_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskRead(BaseModel):
    id: int
    group_id: int
    title: str
    description: Optional[str] = None
    commit_link: Optional[str] = None
    merge_request_link: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[date] = None
    estimated_hours: Optional[int] = None
    created_by: Optional[ProfileBrief] = None
    assignees: list[TaskAssigneeRead] = []
    grades: list[TaskGradeRead] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
