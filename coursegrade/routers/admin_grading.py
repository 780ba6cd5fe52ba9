from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursegrade.core.deps import get_db
from coursegrade.core.permissions import require_admin
from coursegrade.models.profile import Profile
from coursegrade.schemas.grading import (
    AppealRead,
    GradeTaskRequest,
    GradingStats,
    ResolveAppealRequest,
    ResolveAppealResult,
    StudentGroupSummary,
    StudentPerformanceRow,
    UpdateGradeRequest,
)
from coursegrade.schemas.task import TaskGradeRead, TaskRead
from coursegrade.services import statistics, task_grading

router = APIRouter()


@router.get("/grading/tasks", response_model=list[TaskRead])
def tasks_for_grading(
    group_id: Optional[int] = None,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return task_grading.get_tasks_for_grading(db, group_id)


@router.post(
    "/grading/grade",
    response_model=TaskGradeRead,
    status_code=status.HTTP_201_CREATED,
)
def grade_task(
    payload: GradeTaskRequest,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return task_grading.grade_task(
        db,
        task_id=payload.task_id,
        student_id=payload.student_id,
        grader_id=admin.id,
        points=payload.points,
        max_points=payload.max_points,
        feedback=payload.feedback,
    )


@router.patch("/grading/grades/{grade_id}", response_model=TaskGradeRead)
def update_grade(
    grade_id: int,
    payload: UpdateGradeRequest,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return task_grading.update_task_grade(
        db, grade_id, payload.points, payload.max_points, payload.feedback
    )


@router.get("/grading/appeals", response_model=list[AppealRead])
def appeals(
    group_id: Optional[int] = None,
    status_filter: Optional[str] = "pending",
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    # "all" (or an empty value) lists appeals in every status
    if status_filter in ("all", ""):
        status_filter = None
    return task_grading.list_appeals(db, group_id, status_filter)


@router.post("/grading/resolve-appeal", response_model=ResolveAppealResult)
def resolve_appeal(
    payload: ResolveAppealRequest,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    appeal, grade, task_status = task_grading.resolve_appeal(
        db,
        task_id=payload.task_id,
        student_id=payload.student_id,
        grader_id=admin.id,
        points=payload.points,
        feedback=payload.feedback,
        admin_response=payload.admin_response,
        max_points=payload.max_points,
    )
    return {"appeal": appeal, "grade": grade, "task_status": task_status}


@router.get("/grading/stats", response_model=GradingStats)
def grading_stats(
    group_id: Optional[int] = None,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return statistics.get_grading_stats(db, group_id)


@router.get("/grading/performance", response_model=list[StudentPerformanceRow])
def student_performance(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return statistics.get_student_performance(db)


@router.get("/groups/{group_id}/final-grades", response_model=list[StudentGroupSummary])
def group_final_grades(
    group_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return statistics.get_group_final_grades(db, group_id)
