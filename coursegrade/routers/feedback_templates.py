from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursegrade.core.deps import get_db
from coursegrade.core.permissions import require_admin
from coursegrade.models.profile import Profile
from coursegrade.schemas.feedback_template import (
    FeedbackTemplateCreate,
    FeedbackTemplateRead,
    FeedbackTemplateUpdate,
)
from coursegrade.services import feedback_templates

router = APIRouter()


@router.get("", response_model=list[FeedbackTemplateRead])
def list_templates(
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return feedback_templates.list_templates(db, category)


@router.post("", response_model=FeedbackTemplateRead, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: FeedbackTemplateCreate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return feedback_templates.create_template(db, admin.id, payload.model_dump())


@router.patch("/{template_id}", response_model=FeedbackTemplateRead)
def update_template(
    template_id: int,
    payload: FeedbackTemplateUpdate,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    return feedback_templates.update_template(
        db, template_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: int,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    feedback_templates.delete_template(db, template_id)
