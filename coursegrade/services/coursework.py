"""Quiz and assignment stores that feed the grade aggregator."""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from coursegrade.core.errors import InvalidInput, NotFound
from coursegrade.models.assignment import Assignment, AssignmentSubmission
from coursegrade.models.quiz import Quiz, QuizResult
from coursegrade.services import grade_aggregator

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz:
        raise NotFound("Quiz not found")
    return quiz


def create_quiz(db: Session, title: str, grade: int, description: str | None = None) -> Quiz:
    quiz = Quiz(title=title, description=description, grade=grade, closed=False)
    db.add(quiz)
    _commit(db)
    db.refresh(quiz)
    return quiz


def record_quiz_result(
    db: Session, quiz_id: int, user_id: int, score: int, total_questions: int
) -> QuizResult:
    get_quiz(db, quiz_id)
    if score < 0 or total_questions <= 0 or score > total_questions:
        raise InvalidInput(f"score must be between 0 and {total_questions}")

    result = QuizResult(
        quiz_id=quiz_id,
        user_id=user_id,
        score=score,
        total_questions=total_questions,
    )
    db.add(result)
    _commit(db)
    db.refresh(result)

    grade_aggregator.recalculate_grades(db, user_id)
    return result


def close_quiz(db: Session, quiz_id: int) -> Quiz:
    """Close a quiz and fold its points into everyone's grade."""
    quiz = get_quiz(db, quiz_id)
    if not quiz.closed:
        quiz.closed = True
        _commit(db)
        logger.info("Closed quiz %s, recalculating grades", quiz_id)
        grade_aggregator.recalculate_all_grades(db)
    db.refresh(quiz)
    return quiz


def get_assignment(db: Session, assignment_id: int) -> Assignment:
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFound("Assignment not found")
    return assignment


def create_assignment(
    db: Session,
    title: str,
    grade: int,
    description: str | None = None,
    due_at: datetime | None = None,
) -> Assignment:
    assignment = Assignment(
        title=title,
        description=description,
        due_at=due_at,
        grade=grade,
        closed=False,
    )
    db.add(assignment)
    _commit(db)
    db.refresh(assignment)
    return assignment


def submit_assignment(
    db: Session, assignment_id: int, user_id: int, content: str | None
) -> AssignmentSubmission:
    assignment = get_assignment(db, assignment_id)
    if assignment.closed:
        raise InvalidInput("Assignment is closed")

    now = datetime.now(timezone.utc)

    # allow resubmission: update existing submission if it exists
    existing = (
        db.query(AssignmentSubmission)
        .filter(
            AssignmentSubmission.assignment_id == assignment_id,
            AssignmentSubmission.user_id == user_id,
        )
        .first()
    )

    if existing:
        existing.content = content
        existing.submitted_at = now

        # clear previous grading on resubmit
        existing.grade = None
        existing.feedback = None
        existing.graded_at = None

        _commit(db)
        db.refresh(existing)
        return existing

    submission = AssignmentSubmission(
        assignment_id=assignment_id,
        user_id=user_id,
        content=content,
        submitted_at=now,
    )
    db.add(submission)
    _commit(db)
    db.refresh(submission)
    return submission


def grade_submission(
    db: Session,
    assignment_id: int,
    user_id: int,
    grade: int,
    feedback: str | None = None,
) -> AssignmentSubmission:
    assignment = get_assignment(db, assignment_id)

    submission = (
        db.query(AssignmentSubmission)
        .filter(
            AssignmentSubmission.assignment_id == assignment_id,
            AssignmentSubmission.user_id == user_id,
        )
        .first()
    )
    if not submission:
        raise NotFound("Submission not found")

    if grade < 0 or grade > assignment.grade:
        raise InvalidInput(f"grade must be between 0 and {assignment.grade}")

    submission.grade = grade
    submission.feedback = feedback
    submission.graded_at = datetime.now(timezone.utc)
    _commit(db)
    db.refresh(submission)

    grade_aggregator.recalculate_grades(db, user_id)
    return submission


def close_assignment(db: Session, assignment_id: int) -> Assignment:
    """Close an assignment and fold graded submissions into everyone's grade."""
    assignment = get_assignment(db, assignment_id)
    if not assignment.closed:
        assignment.closed = True
        _commit(db)
        logger.info("Closed assignment %s, recalculating grades", assignment_id)
        grade_aggregator.recalculate_all_grades(db)
    db.refresh(assignment)
    return assignment
