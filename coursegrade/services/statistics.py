"""Read-side aggregates for the grading dashboards."""
from sqlalchemy import func
from sqlalchemy.orm import Session

from coursegrade.core.config import TASK_STATUSES
from coursegrade.models.profile import Profile
from coursegrade.models.task import Task, TaskGrade
from coursegrade.services import groups


def completion_rate(done: int, total: int) -> float:
    """Percentage of done tasks, 0 when there are no tasks."""
    if not total:
        return 0.0
    return round(done / total * 100, 2)


def average_score(total_points: int, total_max_points: int) -> float:
    """Awarded points as a percentage of available points."""
    if not total_max_points:
        return 0.0
    return round(total_points / total_max_points * 100, 2)


def task_status_counts(db: Session, group_id: int | None = None) -> dict[str, int]:
    query = db.query(Task.status, func.count(Task.id)).group_by(Task.status)
    if group_id is not None:
        query = query.filter(Task.group_id == group_id)

    counts = {status: 0 for status in TASK_STATUSES}
    for status, count in query.all():
        counts[status] = int(count)
    return counts


def get_grading_stats(db: Session, group_id: int | None = None) -> dict:
    counts = task_status_counts(db, group_id)
    total_tasks = sum(counts.values())

    grades = (
        db.query(
            func.count(TaskGrade.id).label("total_grades"),
            func.coalesce(func.sum(TaskGrade.points), 0).label("points"),
            func.coalesce(func.sum(TaskGrade.max_points), 0).label("max_points"),
        )
        .join(Task, TaskGrade.task_id == Task.id)
    )
    if group_id is not None:
        grades = grades.filter(Task.group_id == group_id)
    row = grades.one()

    return {
        "total_tasks": total_tasks,
        "graded_tasks": counts["graded"],
        "pending_tasks": counts["done"],
        "total_grades": int(row.total_grades or 0),
        "average_score": average_score(int(row.points or 0), int(row.max_points or 0)),
        "completion_rate": completion_rate(counts["done"], total_tasks),
        "status_counts": counts,
    }


def get_student_performance(db: Session) -> list[dict]:
    rows = (
        db.query(
            TaskGrade.student_id,
            Profile.full_name,
            Profile.email,
            func.sum(TaskGrade.points).label("total_points"),
            func.count(TaskGrade.id).label("tasks_graded"),
            func.avg(TaskGrade.points).label("average_points"),
        )
        .outerjoin(Profile, Profile.id == TaskGrade.student_id)
        .group_by(TaskGrade.student_id, Profile.full_name, Profile.email)
        .order_by(func.avg(TaskGrade.points).desc(), TaskGrade.student_id.asc())
        .all()
    )

    return [
        {
            "student_id": r.student_id,
            "student_name": r.full_name,
            "student_email": r.email,
            "total_points": int(r.total_points or 0),
            "tasks_graded": int(r.tasks_graded or 0),
            "average_points": round(float(r.average_points or 0), 2),
        }
        for r in rows
    ]


def get_student_group_summary(db: Session, student_id: int, group_id: int) -> dict | None:
    """Sum of a student's task points in one group, None if nothing is graded."""
    rows = (
        db.query(
            TaskGrade.task_id,
            Task.title.label("task_title"),
            TaskGrade.points,
            TaskGrade.max_points,
            TaskGrade.feedback,
            TaskGrade.graded_at,
        )
        .join(Task, TaskGrade.task_id == Task.id)
        .filter(TaskGrade.student_id == student_id, Task.group_id == group_id)
        .order_by(TaskGrade.graded_at.asc(), TaskGrade.id.asc())
        .all()
    )
    if not rows:
        return None

    return {
        "student_id": student_id,
        "group_id": group_id,
        "total_points": sum(r.points for r in rows),
        "total_max_points": sum(r.max_points for r in rows),
        "graded_task_count": len(rows),
        "task_grades": [
            {
                "task_id": r.task_id,
                "task_title": r.task_title,
                "points": r.points,
                "max_points": r.max_points,
                "feedback": r.feedback,
                "graded_at": r.graded_at,
            }
            for r in rows
        ],
    }


def get_group_final_grades(db: Session, group_id: int) -> list[dict]:
    group = groups.get_group(db, group_id)

    result: list[dict] = []
    for member in sorted(group.members, key=lambda m: (m.user.full_name or m.user.email)):
        summary = get_student_group_summary(db, member.user_id, group_id)
        if summary is None:
            continue
        summary["student_name"] = member.user.full_name or member.user.email
        summary["student_email"] = member.user.email
        result.append(summary)
    return result
