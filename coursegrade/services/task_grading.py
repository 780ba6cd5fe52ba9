"""Per-task, per-student grading and the appeal workflow.

A task flips to ``graded`` once every assignee holds a grade. A student
may appeal a grade; the task sits in ``appeal`` until every pending
appeal on it has been resolved.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from coursegrade.core.config import DEFAULT_TASK_MAX_POINTS
from coursegrade.core.errors import ConflictOrRace, InvalidInput, NotFound
from coursegrade.models.appeal import Appeal
from coursegrade.models.task import Task, TaskAssignee, TaskGrade
from coursegrade.services.task_status import sync_graded_status
from coursegrade.services.tasks import load_task

logger = logging.getLogger(__name__)


def _check_points(points: int, max_points: int) -> None:
    if max_points is None or max_points <= 0:
        raise InvalidInput("max_points must be greater than 0")
    if points is None or points < 0 or points > max_points:
        raise InvalidInput(f"points must be between 0 and {max_points}")


def _lock_task(db: Session, task_id: int) -> Task:
    # row lock serialises graders of the same task on databases that support it
    task = db.query(Task).filter(Task.id == task_id).with_for_update().first()
    if not task:
        raise NotFound("Task not found")
    return task


def _is_assignee(db: Session, task_id: int, student_id: int) -> bool:
    return (
        db.query(TaskAssignee)
        .filter(TaskAssignee.task_id == task_id, TaskAssignee.user_id == student_id)
        .first()
        is not None
    )


def get_task_grade(db: Session, task_id: int, student_id: int) -> TaskGrade | None:
    return (
        db.query(TaskGrade)
        .filter(TaskGrade.task_id == task_id, TaskGrade.student_id == student_id)
        .first()
    )


def get_tasks_for_grading(db: Session, group_id: int | None = None) -> list[Task]:
    query = db.query(Task).options(
        selectinload(Task.created_by),
        selectinload(Task.assignees).selectinload(TaskAssignee.user),
        selectinload(Task.assignees).selectinload(TaskAssignee.assigned_by),
        selectinload(Task.grades),
    )
    if group_id is not None:
        query = query.filter(Task.group_id == group_id)
    return query.order_by(Task.updated_at.desc(), Task.id.desc()).all()


def grade_task(
    db: Session,
    task_id: int,
    student_id: int,
    grader_id: int,
    points: int,
    max_points: int,
    feedback: str | None = None,
) -> TaskGrade:
    """Insert a grade and re-check the task status in one transaction."""
    _check_points(points, max_points)
    _lock_task(db, task_id)

    if not _is_assignee(db, task_id, student_id):
        db.rollback()
        raise InvalidInput("Student is not assigned to this task")

    grade = TaskGrade(
        task_id=task_id,
        student_id=student_id,
        grader_id=grader_id,
        points=points,
        max_points=max_points,
        feedback=feedback,
    )
    db.add(grade)

    try:
        db.flush()
        sync_graded_status(db, task_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictOrRace("This student already has a grade for this task")
    except Exception:
        db.rollback()
        raise

    db.refresh(grade)
    logger.info(
        "Graded task %s for student %s: %s/%s (grader %s)",
        task_id,
        student_id,
        points,
        max_points,
        grader_id,
    )
    return grade


def update_task_grade(
    db: Session,
    grade_id: int,
    points: int,
    max_points: int,
    feedback: str | None = None,
) -> TaskGrade:
    grade = db.query(TaskGrade).filter(TaskGrade.id == grade_id).first()
    if not grade:
        raise NotFound("Grade not found")
    _check_points(points, max_points)

    grade.points = points
    grade.max_points = max_points
    grade.feedback = feedback
    grade.updated_at = datetime.now(timezone.utc)

    try:
        db.flush()
        sync_graded_status(db, grade.task_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(grade)
    logger.info("Updated grade %s: %s/%s", grade_id, points, max_points)
    return grade


def submit_appeal(
    db: Session,
    task_id: int,
    student_id: int,
    requested_points: int,
    reason: str | None = None,
) -> Appeal:
    task = _lock_task(db, task_id)
    if task.status not in ("graded", "appeal"):
        db.rollback()
        raise InvalidInput("Only graded tasks can be appealed")

    grade = get_task_grade(db, task_id, student_id)
    if not grade:
        db.rollback()
        raise InvalidInput("There is no grade to appeal")

    if requested_points is None or requested_points < 0 or requested_points > grade.max_points:
        db.rollback()
        raise InvalidInput(f"requested_points must be between 0 and {grade.max_points}")

    pending = (
        db.query(Appeal)
        .filter(
            Appeal.task_id == task_id,
            Appeal.student_id == student_id,
            Appeal.status == "pending",
        )
        .first()
    )
    if pending:
        db.rollback()
        raise ConflictOrRace("An appeal for this grade is already pending")

    appeal = Appeal(
        task_id=task_id,
        student_id=student_id,
        requested_points=requested_points,
        reason=(reason or "").strip() or None,
        status="pending",
    )
    db.add(appeal)
    task.status = "appeal"
    task.updated_at = datetime.now(timezone.utc)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(appeal)
    logger.info("Student %s appealed task %s (requested %s)", student_id, task_id, requested_points)
    return appeal


def list_appeals(db: Session, group_id: int | None = None, status: str | None = "pending") -> list[Appeal]:
    query = db.query(Appeal).join(Task, Appeal.task_id == Task.id)
    if group_id is not None:
        query = query.filter(Task.group_id == group_id)
    if status is not None:
        query = query.filter(Appeal.status == status)
    return query.order_by(Appeal.created_at.asc(), Appeal.id.asc()).all()


def resolve_appeal(
    db: Session,
    task_id: int,
    student_id: int,
    grader_id: int,
    points: int,
    feedback: str | None = None,
    admin_response: str | None = None,
    max_points: int | None = None,
) -> tuple[Appeal, TaskGrade, str]:
    """Re-grade the appealed grade and close the appeal.

    Returns the resolved appeal, the grade and the task's resulting status.
    """
    task = _lock_task(db, task_id)

    appeal = (
        db.query(Appeal)
        .filter(
            Appeal.task_id == task_id,
            Appeal.student_id == student_id,
            Appeal.status == "pending",
        )
        .first()
    )
    if not appeal:
        db.rollback()
        raise NotFound("No pending appeal for this task and student")

    now = datetime.now(timezone.utc)
    grade = get_task_grade(db, task_id, student_id)
    if grade:
        target_max = max_points if max_points is not None else grade.max_points
    else:
        target_max = max_points if max_points is not None else DEFAULT_TASK_MAX_POINTS
    try:
        _check_points(points, target_max)
    except InvalidInput:
        db.rollback()
        raise

    if grade:
        grade.points = points
        grade.max_points = target_max
        grade.feedback = feedback
        grade.grader_id = grader_id
        grade.updated_at = now
    else:
        grade = TaskGrade(
            task_id=task_id,
            student_id=student_id,
            grader_id=grader_id,
            points=points,
            max_points=target_max,
            feedback=feedback,
        )
        db.add(grade)

    appeal.status = "resolved"
    appeal.admin_response = (admin_response or "").strip() or None
    appeal.resolved_points = points
    appeal.resolved_at = now
    db.flush()

    still_pending = (
        db.query(Appeal)
        .filter(Appeal.task_id == task_id, Appeal.status == "pending")
        .count()
    )
    if not still_pending:
        task.status = "graded"
        task.updated_at = now
        db.flush()
        # a reassignment may have left someone ungraded meanwhile
        sync_graded_status(db, task_id)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictOrRace("Grade was changed concurrently, retry")
    except Exception:
        db.rollback()
        raise

    db.refresh(appeal)
    db.refresh(grade)
    task = load_task(db, task_id)
    logger.info(
        "Resolved appeal %s on task %s for student %s: %s points, task %s",
        appeal.id,
        task_id,
        student_id,
        points,
        task.status,
    )
    return appeal, grade, task.status
