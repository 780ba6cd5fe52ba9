"""Final project tasks: CRUD, assignment, filtering and sorting."""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session, selectinload

from coursegrade.core.config import MEMBER_TASK_STATUSES, TASK_PRIORITIES, TASK_STATUSES
from coursegrade.core.errors import InvalidInput, NotFound, Unauthorized
from coursegrade.models.task import Task, TaskAssignee, TaskGrade
from coursegrade.services import groups
from coursegrade.services.task_status import sync_graded_status

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("createdAt-desc", "createdAt-asc", "score-desc", "score-asc", "priority", "dueDate")
PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


def _task_query(db: Session):
    return db.query(Task).options(
        selectinload(Task.created_by),
        selectinload(Task.assignees).selectinload(TaskAssignee.user),
        selectinload(Task.assignees).selectinload(TaskAssignee.assigned_by),
        selectinload(Task.grades),
    )


def load_task(db: Session, task_id: int) -> Task:
    task = _task_query(db).filter(Task.id == task_id).first()
    if not task:
        raise NotFound("Task not found")
    return task


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _validate_assignees(db: Session, group_id: int, assignee_ids: list[int]) -> list[int]:
    unique_ids = list(dict.fromkeys(assignee_ids))
    invalid = set(unique_ids) - groups.member_ids(db, group_id)
    if invalid:
        raise InvalidInput("Some assignees are not members of this group")
    return unique_ids


def _validate_priority(priority: str | None) -> None:
    if priority is not None and priority not in TASK_PRIORITIES:
        raise InvalidInput("Invalid priority value")


def get_task(db: Session, task_id: int, user_id: int) -> Task:
    task = load_task(db, task_id)
    groups.require_member(db, task.group_id, user_id)
    return task


def list_group_tasks(db: Session, group_id: int, user_id: int) -> list[Task]:
    groups.require_member(db, group_id, user_id)
    return (
        _task_query(db)
        .filter(Task.group_id == group_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


def create_task(db: Session, group_id: int, user_id: int, payload: dict) -> Task:
    groups.require_member(db, group_id, user_id)

    title = (payload.get("title") or "").strip()
    if not title:
        raise InvalidInput("Task title is required")
    _validate_priority(payload.get("priority"))

    assignee_ids = _validate_assignees(db, group_id, payload.get("assignee_ids") or [])

    task = Task(
        group_id=group_id,
        created_by_id=user_id,
        title=title,
        description=(payload.get("description") or "").strip() or None,
        commit_link=payload.get("commit_link") or None,
        merge_request_link=payload.get("merge_request_link") or None,
        priority=payload.get("priority") or "medium",
        status="todo",
        due_date=payload.get("due_date"),
        estimated_hours=payload.get("estimated_hours") or None,
    )
    for assignee_id in assignee_ids:
        task.assignees.append(TaskAssignee(user_id=assignee_id, assigned_by_id=user_id))

    db.add(task)
    _commit(db)

    logger.info("User %s created task %s in group %s", user_id, task.id, group_id)
    return load_task(db, task.id)


def update_task(db: Session, task_id: int, user_id: int, payload: dict) -> Task:
    task = load_task(db, task_id)
    groups.require_member(db, task.group_id, user_id)

    if "title" in payload and not (payload["title"] or "").strip():
        raise InvalidInput("Task title cannot be empty")
    _validate_priority(payload.get("priority"))

    status = payload.get("status")
    if status is not None:
        if status not in TASK_STATUSES:
            raise InvalidInput("Invalid status value")
        if status != task.status:
            if status not in MEMBER_TASK_STATUSES:
                raise InvalidInput(f"Status '{status}' is set by grading, not by hand")
            if task.status not in MEMBER_TASK_STATUSES:
                raise InvalidInput(f"A task in '{task.status}' cannot be moved")

    if "title" in payload:
        task.title = payload["title"].strip()
    if "description" in payload:
        task.description = (payload["description"] or "").strip() or None
    if "commit_link" in payload:
        task.commit_link = payload["commit_link"] or None
    if "merge_request_link" in payload:
        task.merge_request_link = payload["merge_request_link"] or None
    if payload.get("priority") is not None:
        task.priority = payload["priority"]
    if status is not None:
        task.status = status
    if "due_date" in payload:
        task.due_date = payload["due_date"]
    if "estimated_hours" in payload:
        task.estimated_hours = payload["estimated_hours"] or None

    task.updated_at = datetime.now(timezone.utc)
    _commit(db)
    return load_task(db, task_id)


def update_task_status(db: Session, task_id: int, status: str, user_id: int) -> Task:
    if status not in TASK_STATUSES:
        raise InvalidInput("Invalid status value")
    return update_task(db, task_id, user_id, {"status": status})


def delete_task(db: Session, task_id: int, user_id: int) -> None:
    """Assigned tasks may be deleted by an assignee, unassigned ones by the owner."""
    task = load_task(db, task_id)
    membership = groups.require_member(db, task.group_id, user_id)

    if task.assignees:
        if not any(a.user_id == user_id for a in task.assignees):
            raise Unauthorized("Only assigned users can delete this task")
    elif membership.role != "owner":
        raise Unauthorized("Only the group owner can delete unassigned tasks")

    db.delete(task)
    _commit(db)
    logger.info("User %s deleted task %s", user_id, task_id)


def assign_users_to_task(db: Session, task_id: int, assignee_ids: list[int], user_id: int) -> Task:
    """Replace the assignee set, then re-check the graded status."""
    task = load_task(db, task_id)
    groups.require_member(db, task.group_id, user_id)
    assignee_ids = _validate_assignees(db, task.group_id, assignee_ids)

    task.assignees.clear()
    db.flush()
    for assignee_id in assignee_ids:
        task.assignees.append(TaskAssignee(user_id=assignee_id, assigned_by_id=user_id))
    task.updated_at = datetime.now(timezone.utc)
    db.flush()

    sync_graded_status(db, task_id)
    _commit(db)
    return load_task(db, task_id)


def _task_score(task: Task) -> int:
    return max((g.points for g in task.grades), default=0)


def filter_tasks(tasks: list[Task], assignee_ids: list[int] | None = None) -> list[Task]:
    if not assignee_ids:
        return list(tasks)
    wanted = set(assignee_ids)
    return [t for t in tasks if any(a.user_id in wanted for a in t.assignees)]


def sort_tasks(tasks: list[Task], sort_by: str = "createdAt-desc") -> list[Task]:
    if sort_by == "createdAt-desc":
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    if sort_by == "createdAt-asc":
        return sorted(tasks, key=lambda t: t.created_at)
    if sort_by == "score-desc":
        return sorted(tasks, key=_task_score, reverse=True)
    if sort_by == "score-asc":
        return sorted(tasks, key=_task_score)
    if sort_by == "priority":
        return sorted(tasks, key=lambda t: PRIORITY_ORDER.get(t.priority, 0), reverse=True)
    if sort_by == "dueDate":
        # undated tasks last
        return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or datetime.min.date()))
    raise InvalidInput(f"Unknown sort option: {sort_by}")


def filter_and_sort_tasks(
    tasks: list[Task], assignee_ids: list[int] | None = None, sort_by: str = "createdAt-desc"
) -> list[Task]:
    return sort_tasks(filter_tasks(tasks, assignee_ids), sort_by)


def group_tasks_by_status(
    tasks: list[Task], assignee_ids: list[int] | None = None, sort_by: str = "createdAt-desc"
) -> dict[str, list[Task]]:
    grouped: dict[str, list[Task]] = {}
    for task in filter_and_sort_tasks(tasks, assignee_ids, sort_by):
        grouped.setdefault(task.status, []).append(task)
    return grouped


def my_task_grades(db: Session, student_id: int) -> list[TaskGrade]:
    return (
        db.query(TaskGrade)
        .options(selectinload(TaskGrade.task))
        .filter(TaskGrade.student_id == student_id)
        .order_by(TaskGrade.graded_at.desc(), TaskGrade.id.desc())
        .all()
    )
