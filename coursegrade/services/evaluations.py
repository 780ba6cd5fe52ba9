"""Final project weekly evaluations.

Four week buckets worth 50/100/150/150 points. ``total_score`` is the sum
of the stored week scores and is recomputed on every write.
"""
import logging
import math
from datetime import datetime, timezone

from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from coursegrade.core.config import TOTAL_MAX_SCORE, WEEKLY_MAX_SCORES
from coursegrade.core.errors import ConflictOrRace, InvalidInput, Unauthorized
from coursegrade.models.evaluation import FinalEvaluation
from coursegrade.models.group import FinalGroup, FinalGroupMember
from coursegrade.models.profile import Profile
from coursegrade.services import groups

logger = logging.getLogger(__name__)

WEEKS = tuple(sorted(WEEKLY_MAX_SCORES))
WEEK_FIELDS = ("score", "feedback", "github_contributions", "tasks_completed")
COUNT_FIELDS = ("github_contributions", "tasks_completed")


def round_half_up(value: float | None) -> int:
    return int(math.floor((value or 0) + 0.5))


def _validate(weekly_data: dict) -> None:
    for week in WEEKS:
        score = weekly_data.get(f"week{week}_score")
        if score is not None and not 0 <= score <= WEEKLY_MAX_SCORES[week]:
            raise InvalidInput(
                f"week{week}_score must be between 0 and {WEEKLY_MAX_SCORES[week]}"
            )
        for field in COUNT_FIELDS:
            value = weekly_data.get(f"week{week}_{field}")
            if value is not None and value < 0:
                raise InvalidInput(f"week{week}_{field} cannot be negative")


def weekly_breakdown(evaluation: FinalEvaluation) -> list[dict]:
    return [
        {
            "week": week,
            "score": getattr(evaluation, f"week{week}_score") or 0,
            "max_score": WEEKLY_MAX_SCORES[week],
            "feedback": getattr(evaluation, f"week{week}_feedback"),
            "github_contributions": getattr(evaluation, f"week{week}_github_contributions") or 0,
            "tasks_completed": getattr(evaluation, f"week{week}_tasks_completed") or 0,
        }
        for week in WEEKS
    ]


def total_score(evaluation: FinalEvaluation) -> int:
    return sum(getattr(evaluation, f"week{week}_score") or 0 for week in WEEKS)


def to_details(evaluation: FinalEvaluation) -> dict:
    return {
        "id": evaluation.id,
        "group_id": evaluation.group_id,
        "user_id": evaluation.user_id,
        "evaluator_id": evaluation.evaluator_id,
        "total_score": evaluation.total_score,
        "max_score": TOTAL_MAX_SCORE,
        "feedback": evaluation.feedback,
        "updated_at": evaluation.updated_at,
        "student": evaluation.student,
        "group": evaluation.group,
        "evaluator": evaluation.evaluator,
        "weekly_breakdown": weekly_breakdown(evaluation),
    }


def _evaluation_query(db: Session):
    return db.query(FinalEvaluation).options(
        selectinload(FinalEvaluation.student),
        selectinload(FinalEvaluation.group),
        selectinload(FinalEvaluation.evaluator),
    )


def get_student_evaluation(db: Session, group_id: int, user_id: int) -> FinalEvaluation | None:
    return (
        _evaluation_query(db)
        .filter(FinalEvaluation.group_id == group_id, FinalEvaluation.user_id == user_id)
        .first()
    )


def list_evaluations(db: Session) -> list[FinalEvaluation]:
    return (
        _evaluation_query(db)
        .order_by(FinalEvaluation.updated_at.desc(), FinalEvaluation.id.desc())
        .all()
    )


def upsert_evaluation(
    db: Session, group_id: int, user_id: int, evaluator_id: int, weekly_data: dict
) -> FinalEvaluation:
    """Create or update the evaluation for a group member.

    Only keys present in ``weekly_data`` are written; the rest keep their
    stored values (0 / None on a new row).
    """
    if not groups.get_membership(db, group_id, user_id):
        raise Unauthorized("Student is not a member of this group")
    _validate(weekly_data)

    allowed = {f"week{w}_{f}" for w in WEEKS for f in WEEK_FIELDS} | {"feedback"}
    unknown = set(weekly_data) - allowed
    if unknown:
        raise InvalidInput(f"Unknown evaluation fields: {', '.join(sorted(unknown))}")

    evaluation = (
        db.query(FinalEvaluation)
        .filter(FinalEvaluation.group_id == group_id, FinalEvaluation.user_id == user_id)
        .first()
    )
    created = evaluation is None
    if created:
        evaluation = FinalEvaluation(group_id=group_id, user_id=user_id)
        for week in WEEKS:
            setattr(evaluation, f"week{week}_score", 0)
            setattr(evaluation, f"week{week}_github_contributions", 0)
            setattr(evaluation, f"week{week}_tasks_completed", 0)
        db.add(evaluation)

    for field, value in weekly_data.items():
        if field.endswith("_feedback") or field == "feedback":
            value = (value or "").strip() or None
        elif value is None:
            value = 0
        setattr(evaluation, field, value)

    evaluation.evaluator_id = evaluator_id
    evaluation.total_score = total_score(evaluation)
    evaluation.updated_at = datetime.now(timezone.utc)

    try:
        db.commit()
    except IntegrityError:
        # concurrent first write for the same (group, user)
        db.rollback()
        raise ConflictOrRace("Evaluation was created concurrently, retry")
    except Exception:
        db.rollback()
        raise

    logger.info(
        "%s evaluation for user %s in group %s: total %s/%s",
        "Created" if created else "Updated",
        user_id,
        group_id,
        evaluation.total_score,
        TOTAL_MAX_SCORE,
    )
    return get_student_evaluation(db, group_id, user_id)


def get_evaluation_summary(db: Session) -> dict:
    # memberships, not people: a student in two groups counts twice
    total_students = db.query(func.count(FinalGroupMember.id)).scalar() or 0
    distinct_students = (
        db.query(func.count(func.distinct(FinalGroupMember.user_id))).scalar() or 0
    )
    evaluated_students = db.query(func.count(FinalEvaluation.id)).scalar() or 0

    averages = db.query(
        func.avg(FinalEvaluation.total_score).label("total"),
        func.avg(FinalEvaluation.week1_score).label("week1"),
        func.avg(FinalEvaluation.week2_score).label("week2"),
        func.avg(FinalEvaluation.week3_score).label("week3"),
        func.avg(FinalEvaluation.week4_score).label("week4"),
    ).one()

    return {
        "total_students": int(total_students),
        "distinct_students": int(distinct_students),
        "evaluated_students": int(evaluated_students),
        "average_score": round_half_up(averages.total),
        "weekly_averages": {
            f"week{week}": round_half_up(getattr(averages, f"week{week}")) for week in WEEKS
        },
    }


def get_students_for_evaluation(db: Session) -> list[dict]:
    rows = (
        db.query(
            FinalGroupMember.user_id,
            FinalGroupMember.group_id,
            FinalGroup.name.label("group_name"),
            Profile.full_name.label("student_name"),
            Profile.email.label("student_email"),
            Profile.avatar_url.label("student_avatar"),
            FinalEvaluation.id.label("evaluation_id"),
        )
        .join(FinalGroup, FinalGroupMember.group_id == FinalGroup.id)
        .join(Profile, FinalGroupMember.user_id == Profile.id)
        .outerjoin(
            FinalEvaluation,
            and_(
                FinalEvaluation.group_id == FinalGroupMember.group_id,
                FinalEvaluation.user_id == FinalGroupMember.user_id,
            ),
        )
        .order_by(FinalGroup.name.asc(), Profile.full_name.asc(), Profile.id.asc())
        .all()
    )

    return [
        {
            "user_id": r.user_id,
            "group_id": r.group_id,
            "group_name": r.group_name,
            "student_name": r.student_name,
            "student_email": r.student_email,
            "student_avatar": r.student_avatar,
            "has_evaluation": r.evaluation_id is not None,
        }
        for r in rows
    ]
