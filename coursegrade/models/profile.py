from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursegrade.db.base_class import Base


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    full_name: Mapped[str | None] = mapped_column(String(255))
    avatar_url: Mapped[str | None] = mapped_column(String(512))
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="student")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    grade = relationship(
        "StudentGrade", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    memberships = relationship(
        "FinalGroupMember", back_populates="user", cascade="all, delete-orphan"
    )
    quiz_results = relationship(
        "QuizResult", back_populates="user", cascade="all, delete-orphan"
    )
    submissions = relationship(
        "AssignmentSubmission", back_populates="user", cascade="all, delete-orphan"
    )
