from sqlalchemy.orm import Session

from coursegrade.core.errors import NotFound
from coursegrade.models.profile import Profile


def get_by_id(db: Session, profile_id: int) -> Profile | None:
    return db.query(Profile).filter(Profile.id == profile_id).first()


def get_by_email(db: Session, email: str) -> Profile | None:
    return db.query(Profile).filter(Profile.email == email).first()


def require_profile(db: Session, profile_id: int) -> Profile:
    profile = get_by_id(db, profile_id)
    if not profile:
        raise NotFound("Profile not found")
    return profile
