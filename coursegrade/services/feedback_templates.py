import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from coursegrade.core.config import TEMPLATE_CATEGORIES
from coursegrade.core.errors import InvalidInput, NotFound
from coursegrade.models.feedback_template import FeedbackTemplate

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _check_category(category: str) -> None:
    if category not in TEMPLATE_CATEGORIES:
        raise InvalidInput("Invalid template category")


def get_template(db: Session, template_id: int) -> FeedbackTemplate:
    template = db.query(FeedbackTemplate).filter(FeedbackTemplate.id == template_id).first()
    if not template:
        raise NotFound("Template not found")
    return template


def list_templates(db: Session, category: str | None = None) -> list[FeedbackTemplate]:
    query = db.query(FeedbackTemplate)
    if category is not None:
        _check_category(category)
        query = query.filter(FeedbackTemplate.category == category)
    return query.order_by(FeedbackTemplate.category.asc(), FeedbackTemplate.name.asc()).all()


def create_template(db: Session, created_by_id: int, payload: dict) -> FeedbackTemplate:
    _check_category(payload["category"])

    template = FeedbackTemplate(
        name=payload["name"].strip(),
        category=payload["category"],
        content=payload["content"].strip(),
        is_default=bool(payload.get("is_default", False)),
        created_by_id=created_by_id,
    )
    db.add(template)
    _commit(db)
    db.refresh(template)
    return template


def update_template(db: Session, template_id: int, payload: dict) -> FeedbackTemplate:
    template = get_template(db, template_id)

    if payload.get("category") is not None:
        _check_category(payload["category"])
        template.category = payload["category"]
    if payload.get("name") is not None:
        template.name = payload["name"].strip()
    if payload.get("content") is not None:
        template.content = payload["content"].strip()
    if payload.get("is_default") is not None:
        template.is_default = payload["is_default"]

    template.updated_at = datetime.now(timezone.utc)
    _commit(db)
    db.refresh(template)
    return template


def delete_template(db: Session, template_id: int) -> None:
    template = get_template(db, template_id)
    if template.is_default:
        raise InvalidInput("Cannot delete default templates")

    db.delete(template)
    _commit(db)
    logger.info("Deleted feedback template %s", template_id)
