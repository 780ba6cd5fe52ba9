from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from coursegrade.db.base_class import Base


class FinalEvaluation(Base):
    __tablename__ = "final_evaluations"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("final_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    evaluator_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    week1_score = Column(Integer, nullable=False, default=0)
    week1_feedback = Column(Text, nullable=True)
    week1_github_contributions = Column(Integer, nullable=False, default=0)
    week1_tasks_completed = Column(Integer, nullable=False, default=0)

    week2_score = Column(Integer, nullable=False, default=0)
    week2_feedback = Column(Text, nullable=True)
    week2_github_contributions = Column(Integer, nullable=False, default=0)
    week2_tasks_completed = Column(Integer, nullable=False, default=0)

    week3_score = Column(Integer, nullable=False, default=0)
    week3_feedback = Column(Text, nullable=True)
    week3_github_contributions = Column(Integer, nullable=False, default=0)
    week3_tasks_completed = Column(Integer, nullable=False, default=0)

    week4_score = Column(Integer, nullable=False, default=0)
    week4_feedback = Column(Text, nullable=True)
    week4_github_contributions = Column(Integer, nullable=False, default=0)
    week4_tasks_completed = Column(Integer, nullable=False, default=0)

    feedback = Column(Text, nullable=True)
    # always the sum of the four week scores
    total_score = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_final_evaluation_group_user"),
    )

    group = relationship("FinalGroup", back_populates="evaluations")
    student = relationship("Profile", foreign_keys=[user_id])
    evaluator = relationship("Profile", foreign_keys=[evaluator_id])
