from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from coursegrade.db.base_class import Base


class Task(Base):
    __tablename__ = "final_tasks"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("final_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    commit_link = Column(String(512), nullable=True)
    merge_request_link = Column(String(512), nullable=True)

    priority = Column(String(20), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="todo", index=True)
    due_date = Column(Date, nullable=True)
    estimated_hours = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    group = relationship("FinalGroup", back_populates="tasks")
    created_by = relationship("Profile")

    assignees = relationship("TaskAssignee", back_populates="task", cascade="all, delete-orphan")
    grades = relationship("TaskGrade", back_populates="task", cascade="all, delete-orphan")
    appeals = relationship("Appeal", back_populates="task", cascade="all, delete-orphan")


class TaskAssignee(Base):
    __tablename__ = "final_task_assignees"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("final_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_by_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_task_assignee_task_user"),
    )

    task = relationship("Task", back_populates="assignees")
    user = relationship("Profile", foreign_keys=[user_id])
    assigned_by = relationship("Profile", foreign_keys=[assigned_by_id])


class TaskGrade(Base):
    __tablename__ = "final_task_grades"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("final_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    grader_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    points = Column(Integer, nullable=False)
    max_points = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)

    graded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # one grade per assignee; a second insert for the same pair is a race or a duplicate
    __table_args__ = (
        UniqueConstraint("task_id", "student_id", name="uq_task_grade_task_student"),
    )

    task = relationship("Task", back_populates="grades")
    student = relationship("Profile", foreign_keys=[student_id])
    grader = relationship("Profile", foreign_keys=[grader_id])
