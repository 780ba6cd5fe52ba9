"""Course grade aggregation.

A student's grade is rebuilt from quiz results and assignment submissions:

- quiz points: the ``grade`` of every closed quiz the student took
- assignment points: the awarded grade of every graded submission to a
  closed assignment
- extra points: bonus set by an admin, never touched by a recalculation

``total_points`` and ``max_possible_points`` are derived and only written
here.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from coursegrade.core.errors import InvalidInput
from coursegrade.models.assignment import Assignment, AssignmentSubmission
from coursegrade.models.grade import StudentGrade
from coursegrade.models.profile import Profile
from coursegrade.models.quiz import Quiz, QuizResult
from coursegrade.services.profiles import require_profile

logger = logging.getLogger(__name__)

COMPUTED_FIELDS = (
    "quiz_points",
    "max_quiz_points",
    "assignment_points",
    "max_assignment_points",
)


def calculate_grades(db: Session, user_id: int) -> dict[str, int]:
    """Compute the grade components from current submission data (read only)."""
    taken_quizzes = select(QuizResult.quiz_id).where(QuizResult.user_id == user_id)

    quiz_points = (
        db.query(func.coalesce(func.sum(Quiz.grade), 0))
        .filter(
            Quiz.id.in_(taken_quizzes),
            Quiz.closed.is_(True),
            Quiz.grade > 0,
        )
        .scalar()
    )

    max_quiz_points = (
        db.query(func.coalesce(func.sum(Quiz.grade), 0))
        .filter(Quiz.closed.is_(True))
        .scalar()
    )

    assignment_points = (
        db.query(func.coalesce(func.sum(AssignmentSubmission.grade), 0))
        .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
        .filter(
            AssignmentSubmission.user_id == user_id,
            AssignmentSubmission.grade.is_not(None),
            Assignment.closed.is_(True),
        )
        .scalar()
    )

    max_assignment_points = (
        db.query(func.coalesce(func.sum(Assignment.grade), 0))
        .filter(Assignment.closed.is_(True))
        .scalar()
    )

    return {
        "quiz_points": int(quiz_points or 0),
        "max_quiz_points": int(max_quiz_points or 0),
        "assignment_points": int(assignment_points or 0),
        "max_assignment_points": int(max_assignment_points or 0),
    }


def _apply_totals(grade: StudentGrade) -> None:
    grade.total_points = (
        (grade.quiz_points or 0) + (grade.assignment_points or 0) + (grade.extra_points or 0)
    )
    grade.max_possible_points = (grade.max_quiz_points or 0) + (grade.max_assignment_points or 0)


def get_student_grade(db: Session, user_id: int) -> StudentGrade:
    """Return the grade row, creating it from current data on first access."""
    grade = db.query(StudentGrade).filter(StudentGrade.user_id == user_id).first()
    if grade:
        return grade

    require_profile(db, user_id)

    grade = StudentGrade(user_id=user_id, extra_points=0, **calculate_grades(db, user_id))
    _apply_totals(grade)
    db.add(grade)

    try:
        db.commit()
    except IntegrityError:
        # another request created it first
        db.rollback()
        return db.query(StudentGrade).filter(StudentGrade.user_id == user_id).one()

    db.refresh(grade)
    logger.info("Created grade record for user %s (total=%s)", user_id, grade.total_points)
    return grade


def recalculate_grades(db: Session, user_id: int) -> StudentGrade:
    """Rebuild computed fields; extra points are kept. Idempotent."""
    grade = get_student_grade(db, user_id)
    fresh = calculate_grades(db, user_id)

    before = (grade.total_points, grade.max_possible_points) + tuple(
        getattr(grade, f) for f in COMPUTED_FIELDS
    )
    for field, value in fresh.items():
        setattr(grade, field, value)
    _apply_totals(grade)
    after = (grade.total_points, grade.max_possible_points) + tuple(
        getattr(grade, f) for f in COMPUTED_FIELDS
    )

    if before == after:
        return grade

    grade.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(grade)
    logger.info(
        "Recalculated grade for user %s: %s/%s",
        user_id,
        grade.total_points,
        grade.max_possible_points,
    )
    return grade


def update_extra_points(db: Session, user_id: int, extra_points: int) -> StudentGrade:
    if extra_points is None or extra_points < 0:
        logger.warning("Rejected extra points %r for user %s", extra_points, user_id)
        raise InvalidInput("extra_points must be a non-negative integer")

    grade = get_student_grade(db, user_id)
    grade.extra_points = extra_points
    _apply_totals(grade)
    grade.updated_at = datetime.now(timezone.utc)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(grade)
    logger.info("Set extra points for user %s to %s", user_id, extra_points)
    return grade


def recalculate_all_grades(db: Session) -> int:
    """Recalculate every profile plus any grade row; returns how many."""
    user_ids = {row.id for row in db.query(Profile.id).all()}
    user_ids |= {row.user_id for row in db.query(StudentGrade.user_id).all()}

    for user_id in sorted(user_ids):
        recalculate_grades(db, user_id)

    logger.info("Recalculated grades for %d users", len(user_ids))
    return len(user_ids)


def list_student_grades(db: Session) -> list[StudentGrade]:
    return (
        db.query(StudentGrade)
        .options(joinedload(StudentGrade.user))
        .order_by(StudentGrade.total_points.desc(), StudentGrade.user_id.asc())
        .all()
    )
