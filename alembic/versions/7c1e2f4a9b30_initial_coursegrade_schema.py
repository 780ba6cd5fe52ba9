"""initial coursegrade schema

Revision ID: 7c1e2f4a9b30
Revises:
Create Date: 2026-10-19 10:12:41.318220

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c1e2f4a9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=None if nullable else sa.text("(CURRENT_TIMESTAMP)"),
        nullable=nullable,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=512), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_profiles_id"), "profiles", ["id"])
    op.create_index(op.f("ix_profiles_email"), "profiles", ["email"], unique=True)

    op.create_table(
        "quizzes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("closed", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_quizzes_id"), "quizzes", ["id"])

    op.create_table(
        "quiz_results",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("quiz_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        _timestamp("completed_at"),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_quiz_results_id"), "quiz_results", ["id"])
    op.create_index(op.f("ix_quiz_results_quiz_id"), "quiz_results", ["quiz_id"])
    op.create_index(op.f("ix_quiz_results_user_id"), "quiz_results", ["user_id"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("closed", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_assignments_id"), "assignments", ["id"])

    op.create_table(
        "assignment_submissions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("assignment_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        _timestamp("submitted_at"),
        sa.Column("grade", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        _timestamp("graded_at", nullable=True),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("assignment_id", "user_id", name="uq_submission_assignment_user"),
    )
    op.create_index(op.f("ix_assignment_submissions_id"), "assignment_submissions", ["id"])
    op.create_index(
        op.f("ix_assignment_submissions_assignment_id"), "assignment_submissions", ["assignment_id"]
    )
    op.create_index(op.f("ix_assignment_submissions_user_id"), "assignment_submissions", ["user_id"])

    op.create_table(
        "student_grades",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("quiz_points", sa.Integer(), nullable=False),
        sa.Column("max_quiz_points", sa.Integer(), nullable=False),
        sa.Column("assignment_points", sa.Integer(), nullable=False),
        sa.Column("max_assignment_points", sa.Integer(), nullable=False),
        sa.Column("extra_points", sa.Integer(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("max_possible_points", sa.Integer(), nullable=False),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_student_grades_id"), "student_grades", ["id"])
    op.create_index(op.f("ix_student_grades_user_id"), "student_grades", ["user_id"], unique=True)

    op.create_table(
        "final_groups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_final_groups_id"), "final_groups", ["id"])

    op.create_table(
        "final_group_members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        _timestamp("joined_at"),
        sa.ForeignKeyConstraint(["group_id"], ["final_groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "user_id", name="uq_final_group_members_group_user"),
    )
    op.create_index(op.f("ix_final_group_members_id"), "final_group_members", ["id"])
    op.create_index(op.f("ix_final_group_members_group_id"), "final_group_members", ["group_id"])
    op.create_index(op.f("ix_final_group_members_user_id"), "final_group_members", ["user_id"])

    op.create_table(
        "final_tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("commit_link", sa.String(length=512), nullable=True),
        sa.Column("merge_request_link", sa.String(length=512), nullable=True),
        sa.Column("priority", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("estimated_hours", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["group_id"], ["final_groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_final_tasks_id"), "final_tasks", ["id"])
    op.create_index(op.f("ix_final_tasks_group_id"), "final_tasks", ["group_id"])
    op.create_index(op.f("ix_final_tasks_status"), "final_tasks", ["status"])

    op.create_table(
        "final_task_assignees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("assigned_by_id", sa.Integer(), nullable=True),
        _timestamp("assigned_at"),
        sa.ForeignKeyConstraint(["task_id"], ["final_tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assigned_by_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "user_id", name="uq_task_assignee_task_user"),
    )
    op.create_index(op.f("ix_final_task_assignees_id"), "final_task_assignees", ["id"])
    op.create_index(op.f("ix_final_task_assignees_task_id"), "final_task_assignees", ["task_id"])
    op.create_index(op.f("ix_final_task_assignees_user_id"), "final_task_assignees", ["user_id"])

    op.create_table(
        "final_task_grades",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("grader_id", sa.Integer(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("max_points", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        _timestamp("graded_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["task_id"], ["final_tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["grader_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "student_id", name="uq_task_grade_task_student"),
    )
    op.create_index(op.f("ix_final_task_grades_id"), "final_task_grades", ["id"])
    op.create_index(op.f("ix_final_task_grades_task_id"), "final_task_grades", ["task_id"])
    op.create_index(op.f("ix_final_task_grades_student_id"), "final_task_grades", ["student_id"])

    op.create_table(
        "task_appeals",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("requested_points", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("admin_response", sa.Text(), nullable=True),
        sa.Column("resolved_points", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        _timestamp("resolved_at", nullable=True),
        sa.ForeignKeyConstraint(["task_id"], ["final_tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_task_appeals_id"), "task_appeals", ["id"])
    op.create_index(op.f("ix_task_appeals_task_id"), "task_appeals", ["task_id"])
    op.create_index(op.f("ix_task_appeals_student_id"), "task_appeals", ["student_id"])
    op.create_index(op.f("ix_task_appeals_status"), "task_appeals", ["status"])

    op.create_table(
        "final_evaluations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("evaluator_id", sa.Integer(), nullable=True),
        *[
            column
            for week in (1, 2, 3, 4)
            for column in (
                sa.Column(f"week{week}_score", sa.Integer(), nullable=False),
                sa.Column(f"week{week}_feedback", sa.Text(), nullable=True),
                sa.Column(f"week{week}_github_contributions", sa.Integer(), nullable=False),
                sa.Column(f"week{week}_tasks_completed", sa.Integer(), nullable=False),
            )
        ],
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("total_score", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["group_id"], ["final_groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["evaluator_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "user_id", name="uq_final_evaluation_group_user"),
    )
    op.create_index(op.f("ix_final_evaluations_id"), "final_evaluations", ["id"])
    op.create_index(op.f("ix_final_evaluations_group_id"), "final_evaluations", ["group_id"])
    op.create_index(op.f("ix_final_evaluations_user_id"), "final_evaluations", ["user_id"])

    op.create_table(
        "feedback_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["created_by_id"], ["profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_feedback_templates_id"), "feedback_templates", ["id"])
    op.create_index(op.f("ix_feedback_templates_category"), "feedback_templates", ["category"])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "feedback_templates",
        "final_evaluations",
        "task_appeals",
        "final_task_grades",
        "final_task_assignees",
        "final_tasks",
        "final_group_members",
        "final_groups",
        "student_grades",
        "assignment_submissions",
        "assignments",
        "quiz_results",
        "quizzes",
        "profiles",
    ):
        op.drop_table(table)
