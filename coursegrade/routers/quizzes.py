from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursegrade.core.current_user import get_current_user
from coursegrade.core.deps import get_db
from coursegrade.core.permissions import require_admin
from coursegrade.models.profile import Profile
from coursegrade.models.quiz import Quiz
from coursegrade.schemas.quiz import QuizCreate, QuizRead, QuizResultCreate, QuizResultRead
from coursegrade.services import coursework

router = APIRouter()


@router.get("", response_model=list[QuizRead])
def list_quizzes(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return db.query(Quiz).order_by(Quiz.id.asc()).all()


@router.post("", response_model=QuizRead, status_code=status.HTTP_201_CREATED)
def create_quiz(
    payload: QuizCreate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return coursework.create_quiz(db, payload.title, payload.grade, payload.description)


@router.post("/{quiz_id}/close", response_model=QuizRead)
def close_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return coursework.close_quiz(db, quiz_id)


@router.post(
    "/{quiz_id}/results",
    response_model=QuizResultRead,
    status_code=status.HTTP_201_CREATED,
)
def record_result(
    quiz_id: int,
    payload: QuizResultCreate,
    db: Session = Depends(get_db),
    me: Profile = Depends(get_current_user),
):
    return coursework.record_quiz_result(
        db, quiz_id, me.id, payload.score, payload.total_questions
    )
