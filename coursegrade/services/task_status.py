import logging
from datetime import datetime, timezone

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from coursegrade.models.task import Task, TaskAssignee, TaskGrade

logger = logging.getLogger(__name__)


def _counts(task_id: int):
    assignee_count = (
        select(func.count(TaskAssignee.id))
        .where(TaskAssignee.task_id == task_id)
        .scalar_subquery()
    )
    graded_count = (
        select(func.count(TaskGrade.id))
        .select_from(TaskGrade)
        .join(
            TaskAssignee,
            and_(
                TaskAssignee.task_id == TaskGrade.task_id,
                TaskAssignee.user_id == TaskGrade.student_id,
            ),
        )
        .where(TaskGrade.task_id == task_id)
        .scalar_subquery()
    )
    return assignee_count, graded_count


def sync_graded_status(db: Session, task_id: int) -> str | None:
    """Move a task in or out of ``graded`` from its current grade count.

    Runs inside the caller's transaction; the caller commits. Each move is
    one conditional UPDATE so the count check and the write cannot
    interleave with another grader. Returns the new status if it changed.
    """
    assignee_count, graded_count = _counts(task_id)
    now = datetime.now(timezone.utc)

    promoted = db.execute(
        update(Task)
        .where(
            Task.id == task_id,
            Task.status.not_in(("graded", "appeal")),
            assignee_count > 0,
            graded_count == assignee_count,
        )
        .values(status="graded", updated_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    if promoted:
        logger.info("Task %s: every assignee graded, status -> graded", task_id)
        return "graded"

    demoted = db.execute(
        update(Task)
        .where(
            Task.id == task_id,
            Task.status == "graded",
            or_(assignee_count == 0, graded_count < assignee_count),
        )
        .values(status="done", updated_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    if demoted:
        logger.info("Task %s: assignee without a grade, status -> done", task_id)
        return "done"

    return None
