from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursegrade.core.deps import get_db
from coursegrade.core.errors import NotFound
from coursegrade.core.permissions import require_admin
from coursegrade.models.profile import Profile
from coursegrade.schemas.evaluation import (
    EvaluationRead,
    EvaluationSummary,
    EvaluationUpsert,
    StudentForEvaluation,
)
from coursegrade.services import evaluations

router = APIRouter()


@router.get("", response_model=list[EvaluationRead])
def list_evaluations(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return [evaluations.to_details(e) for e in evaluations.list_evaluations(db)]


@router.post("", response_model=EvaluationRead)
def upsert_evaluation(
    payload: EvaluationUpsert,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    evaluation = evaluations.upsert_evaluation(
        db, payload.group_id, payload.user_id, admin.id, payload.weekly_data()
    )
    return evaluations.to_details(evaluation)


@router.get("/summary", response_model=EvaluationSummary)
def evaluation_summary(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return evaluations.get_evaluation_summary(db)


@router.get("/students", response_model=list[StudentForEvaluation])
def students_for_evaluation(
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return evaluations.get_students_for_evaluation(db)


@router.get("/{group_id}/{user_id}", response_model=EvaluationRead)
def student_evaluation(
    group_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    evaluation = evaluations.get_student_evaluation(db, group_id, user_id)
    if not evaluation:
        raise NotFound("Evaluation not found")
    return evaluations.to_details(evaluation)
