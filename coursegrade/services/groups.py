import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from coursegrade.core.errors import ConflictOrRace, NotFound, Unauthorized
from coursegrade.models.group import FinalGroup, FinalGroupMember
from coursegrade.models.task import Task, TaskAssignee
from coursegrade.services.task_status import sync_graded_status

logger = logging.getLogger(__name__)


def get_membership(db: Session, group_id: int, user_id: int) -> FinalGroupMember | None:
    return (
        db.query(FinalGroupMember)
        .filter(FinalGroupMember.group_id == group_id, FinalGroupMember.user_id == user_id)
        .first()
    )


def require_member(db: Session, group_id: int, user_id: int) -> FinalGroupMember:
    membership = get_membership(db, group_id, user_id)
    if not membership:
        raise Unauthorized("User is not a member of this group")
    return membership


def member_ids(db: Session, group_id: int) -> set[int]:
    rows = db.query(FinalGroupMember.user_id).filter(FinalGroupMember.group_id == group_id).all()
    return {r.user_id for r in rows}


def get_group(db: Session, group_id: int) -> FinalGroup:
    group = (
        db.query(FinalGroup)
        .options(selectinload(FinalGroup.members).selectinload(FinalGroupMember.user))
        .filter(FinalGroup.id == group_id)
        .first()
    )
    if not group:
        raise NotFound("Group not found")
    return group


def list_groups(db: Session) -> list[FinalGroup]:
    return (
        db.query(FinalGroup)
        .options(selectinload(FinalGroup.members).selectinload(FinalGroupMember.user))
        .order_by(FinalGroup.name.asc())
        .all()
    )


def my_groups(db: Session, user_id: int) -> list[FinalGroup]:
    return (
        db.query(FinalGroup)
        .join(FinalGroupMember, FinalGroupMember.group_id == FinalGroup.id)
        .options(selectinload(FinalGroup.members).selectinload(FinalGroupMember.user))
        .filter(FinalGroupMember.user_id == user_id)
        .order_by(FinalGroup.name.asc())
        .all()
    )


def create_group(db: Session, user_id: int, name: str, description: str | None = None) -> FinalGroup:
    group = FinalGroup(name=name.strip(), description=description)
    group.members.append(FinalGroupMember(user_id=user_id, role="owner"))
    db.add(group)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("User %s created final group %s", user_id, group.id)
    return get_group(db, group.id)


def join_group(db: Session, group_id: int, user_id: int) -> FinalGroup:
    get_group(db, group_id)

    db.add(FinalGroupMember(group_id=group_id, user_id=user_id, role="member"))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictOrRace("Already a member of this group")

    return get_group(db, group_id)


def leave_group(db: Session, group_id: int, user_id: int) -> None:
    """Leave a group; ownership passes to the longest-standing member.

    The leaver is unassigned from the group's tasks and those tasks get
    their graded status re-checked.
    """
    membership = get_membership(db, group_id, user_id)
    if not membership:
        raise NotFound("Not a member of this group")

    was_owner = membership.role == "owner"
    db.delete(membership)

    assignments = (
        db.query(TaskAssignee)
        .join(Task, TaskAssignee.task_id == Task.id)
        .filter(Task.group_id == group_id, TaskAssignee.user_id == user_id)
        .all()
    )
    task_ids = sorted({a.task_id for a in assignments})
    for assignment in assignments:
        db.delete(assignment)
    db.flush()

    remaining = (
        db.query(FinalGroupMember)
        .filter(FinalGroupMember.group_id == group_id)
        .order_by(FinalGroupMember.joined_at.asc(), FinalGroupMember.id.asc())
        .all()
    )
    if not remaining:
        group = db.query(FinalGroup).filter(FinalGroup.id == group_id).first()
        if group:
            db.delete(group)
    else:
        if was_owner:
            remaining[0].role = "owner"
        for task_id in task_ids:
            sync_graded_status(db, task_id)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
