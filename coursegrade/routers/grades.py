from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursegrade.core.current_user import get_current_user
from coursegrade.core.deps import get_db
from coursegrade.core.permissions import require_admin
from coursegrade.models.profile import Profile
from coursegrade.schemas.grade import (
    ExtraPointsUpdate,
    RecalculateAllResult,
    StudentGradeRead,
    StudentGradeRow,
)
from coursegrade.services import grade_aggregator

router = APIRouter()


@router.get("/me", response_model=StudentGradeRead)
def my_grade(
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return grade_aggregator.get_student_grade(db, me.id)


@router.get("", response_model=list[StudentGradeRow])
def all_grades(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return grade_aggregator.list_student_grades(db)


@router.post("/recalculate", response_model=RecalculateAllResult)
def recalculate_all(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return {"success": True, "count": grade_aggregator.recalculate_all_grades(db)}


@router.post("/{user_id}/recalculate", response_model=StudentGradeRead)
def recalculate_one(
    user_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return grade_aggregator.recalculate_grades(db, user_id)


@router.patch("/{user_id}/extra-points", response_model=StudentGradeRead)
def set_extra_points(
    user_id: int,
    payload: ExtraPointsUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return grade_aggregator.update_extra_points(db, user_id, payload.extra_points)
