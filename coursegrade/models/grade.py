from sqlalchemy import Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship

from coursegrade.db.base_class import Base


class StudentGrade(Base):
    """Course grade for one student.

    ``total_points`` and ``max_possible_points`` are only ever written by the
    aggregator; ``extra_points`` is the one admin-editable field.
    """

    __tablename__ = "student_grades"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )

    quiz_points = Column(Integer, nullable=False, default=0)
    max_quiz_points = Column(Integer, nullable=False, default=0)
    assignment_points = Column(Integer, nullable=False, default=0)
    max_assignment_points = Column(Integer, nullable=False, default=0)
    extra_points = Column(Integer, nullable=False, default=0)

    total_points = Column(Integer, nullable=False, default=0)
    max_possible_points = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("Profile", back_populates="grade")
