from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from coursegrade.db.base_class import Base


class Appeal(Base):
    __tablename__ = "task_appeals"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("final_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    requested_points = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)  # pending | resolved
    admin_response = Column(Text, nullable=True)
    resolved_points = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    task = relationship("Task", back_populates="appeals")
    student = relationship("Profile")
