from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coursegrade.core.config import ACCESS_TOKEN_EXPIRE
from coursegrade.core.current_user import get_current_user
from coursegrade.core.deps import get_db
from coursegrade.core.security import create_access_token, hash_password, verify_password
from coursegrade.models.profile import Profile
from coursegrade.schemas.user import LoginRequest, Token, UserCreate, UserRead
from coursegrade.services import profiles

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Email already registered"},
    },
)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    if profiles.get_by_email(db, payload.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = Profile(
        email=payload.email,
        full_name=payload.full_name,
        avatar_url=payload.avatar_url,
        hashed_password=hash_password(payload.password),
        role="student",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.post(
    "/login",
    response_model=Token,
    responses={
        401: {"description": "Invalid email or password"},
    },
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = profiles.get_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role},
        expires_delta=ACCESS_TOKEN_EXPIRE,
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.get("/me", response_model=UserRead)
def me(current_user: Profile = Depends(get_current_user)):
    return current_user
