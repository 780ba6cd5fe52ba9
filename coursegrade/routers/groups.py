from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursegrade.core.current_user import get_current_user
from coursegrade.core.deps import get_db
from coursegrade.models.profile import Profile
from coursegrade.schemas.group import GroupCreate, GroupRead
from coursegrade.services import groups

router = APIRouter()


@router.get("", response_model=list[GroupRead])
def list_groups(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return groups.list_groups(db)


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return groups.create_group(db, me.id, payload.name, payload.description)


@router.get("/mine", response_model=list[GroupRead])
def my_groups(
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return groups.my_groups(db, me.id)


@router.post("/{group_id}/join", response_model=GroupRead)
def join_group(
    group_id: int,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return groups.join_group(db, group_id, me.id)


@router.post("/{group_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_group(
    group_id: int,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    groups.leave_group(db, group_id, me.id)
