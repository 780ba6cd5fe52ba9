from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from coursegrade.core.current_user import get_current_user
from coursegrade.core.deps import get_db
from coursegrade.core.errors import NotFound
from coursegrade.models.profile import Profile
from coursegrade.schemas.grading import AppealCreate, AppealRead
from coursegrade.schemas.task import (
    TaskAssign,
    TaskCreate,
    TaskGradeRead,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from coursegrade.services import task_grading, tasks

router = APIRouter()


def _task_in_group(db: Session, group_id: int, task_id: int, user_id: int):
    task = tasks.get_task(db, task_id, user_id)
    if task.group_id != group_id:
        raise NotFound("Task not found")
    return task


@router.get("/groups/{group_id}/tasks", response_model=list[TaskRead])
def list_tasks(
    group_id: int,
    assignee_ids: list[int] = Query(default=[]),
    sort_by: str = "createdAt-desc",
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    group_tasks = tasks.list_group_tasks(db, group_id, me.id)
    return tasks.filter_and_sort_tasks(group_tasks, assignee_ids, sort_by)


@router.get("/groups/{group_id}/tasks/board", response_model=dict[str, list[TaskRead]])
def task_board(
    group_id: int,
    assignee_ids: list[int] = Query(default=[]),
    sort_by: str = "createdAt-desc",
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    group_tasks = tasks.list_group_tasks(db, group_id, me.id)
    return tasks.group_tasks_by_status(group_tasks, assignee_ids, sort_by)


@router.post(
    "/groups/{group_id}/tasks",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    group_id: int,
    payload: TaskCreate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return tasks.create_task(db, group_id, me.id, payload.model_dump())


@router.get("/groups/{group_id}/tasks/{task_id}", response_model=TaskRead)
def get_task(
    group_id: int,
    task_id: int,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return _task_in_group(db, group_id, task_id, me.id)


@router.patch("/groups/{group_id}/tasks/{task_id}", response_model=TaskRead)
def update_task(
    group_id: int,
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    _task_in_group(db, group_id, task_id, me.id)
    return tasks.update_task(db, task_id, me.id, payload.model_dump(exclude_unset=True))


@router.patch("/groups/{group_id}/tasks/{task_id}/status", response_model=TaskRead)
def move_task(
    group_id: int,
    task_id: int,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    _task_in_group(db, group_id, task_id, me.id)
    return tasks.update_task_status(db, task_id, payload.status, me.id)


@router.put("/groups/{group_id}/tasks/{task_id}/assign", response_model=TaskRead)
def assign_task(
    group_id: int,
    task_id: int,
    payload: TaskAssign,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    _task_in_group(db, group_id, task_id, me.id)
    return tasks.assign_users_to_task(db, task_id, payload.assignee_ids, me.id)


@router.delete("/groups/{group_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    group_id: int,
    task_id: int,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    _task_in_group(db, group_id, task_id, me.id)
    tasks.delete_task(db, task_id, me.id)


@router.post(
    "/groups/{group_id}/tasks/{task_id}/appeal",
    response_model=AppealRead,
    status_code=status.HTTP_201_CREATED,
)
def appeal_grade(
    group_id: int,
    task_id: int,
    payload: AppealCreate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    _task_in_group(db, group_id, task_id, me.id)
    return task_grading.submit_appeal(db, task_id, me.id, payload.requested_points, payload.reason)


@router.get("/grades/my-tasks", response_model=list[TaskGradeRead])
def my_task_grades(
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return tasks.my_task_grades(db, me.id)
