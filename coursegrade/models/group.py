from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursegrade.db.base_class import Base


class FinalGroup(Base):
    __tablename__ = "final_groups"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    members = relationship(
        "FinalGroupMember", back_populates="group", cascade="all, delete-orphan"
    )
    tasks = relationship("Task", back_populates="group", cascade="all, delete-orphan")
    evaluations = relationship(
        "FinalEvaluation", back_populates="group", cascade="all, delete-orphan"
    )


class FinalGroupMember(Base):
    __tablename__ = "final_group_members"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    group_id: Mapped[int] = mapped_column(
        ForeignKey("final_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="member")
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_final_group_members_group_user"),
    )

    group = relationship("FinalGroup", back_populates="members")
    user = relationship("Profile", back_populates="memberships")
