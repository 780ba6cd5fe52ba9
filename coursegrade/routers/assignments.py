from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursegrade.core.current_user import get_current_user
from coursegrade.core.deps import get_db
from coursegrade.core.permissions import require_admin
from coursegrade.models.assignment import Assignment, AssignmentSubmission
from coursegrade.models.profile import Profile
from coursegrade.schemas.assignment import (
    AssignmentCreate,
    AssignmentRead,
    SubmissionCreate,
    SubmissionGradeUpdate,
    SubmissionRead,
)
from coursegrade.services import coursework

router = APIRouter()


@router.get("", response_model=list[AssignmentRead])
def list_assignments(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return (
        db.query(Assignment)
        .order_by(Assignment.due_at.is_(None), Assignment.due_at.asc(), Assignment.id.asc())
        .all()
    )


@router.post("", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return coursework.create_assignment(
        db,
        title=payload.title,
        grade=payload.grade,
        description=payload.description,
        due_at=payload.due_at,
    )


@router.post("/{assignment_id}/close", response_model=AssignmentRead)
def close_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return coursework.close_assignment(db, assignment_id)


@router.post(
    "/{assignment_id}/submissions",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int,
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return coursework.submit_assignment(db, assignment_id, me.id, payload.content)


@router.get("/{assignment_id}/submissions", response_model=list[SubmissionRead])
def list_submissions(
    assignment_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    coursework.get_assignment(db, assignment_id)
    return (
        db.query(AssignmentSubmission)
        .filter(AssignmentSubmission.assignment_id == assignment_id)
        .order_by(AssignmentSubmission.submitted_at.asc())
        .all()
    )


@router.patch("/{assignment_id}/grade/{user_id}", response_model=SubmissionRead)
def grade_submission(
    assignment_id: int,
    user_id: int,
    payload: SubmissionGradeUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return coursework.grade_submission(
        db, assignment_id, user_id, payload.grade, payload.feedback
    )
