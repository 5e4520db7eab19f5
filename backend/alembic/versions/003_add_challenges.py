"""Add challenges, tasks and per-user challenge progress

Revision ID: 003_add_challenges
Revises: 002_add_programs_and_sessions

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "003_add_challenges"
down_revision: Union[str, None] = "002_add_programs_and_sessions"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "challenges",
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("difficulty", sa.String(), nullable=False, server_default="BEGINNER"),
        sa.Column("target_reps", sa.Integer(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("challenge_id"),
    )

    op.create_table(
        "challenge_tasks",
        sa.Column("task_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("target_reps", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("sets", sa.Integer(), nullable=True),
        sa.Column("reps_per_set", sa.Integer(), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.challenge_id"]),
        sa.PrimaryKeyConstraint("task_id"),
    )
    op.create_index(
        op.f("ix_challenge_tasks_challenge_id"),
        "challenge_tasks",
        ["challenge_id"],
        unique=False,
    )

    op.create_table(
        "user_challenge_task_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("task_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["task_id"], ["challenge_tasks.task_id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "task_id", name="uq_user_task_progress"),
    )
    op.create_index(
        op.f("ix_user_challenge_task_progress_user_id"),
        "user_challenge_task_progress",
        ["user_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_user_challenge_task_progress_task_id"),
        "user_challenge_task_progress",
        ["task_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_user_challenge_task_progress_challenge_id"),
        "user_challenge_task_progress",
        ["challenge_id"],
        unique=False,
    )

    op.create_table(
        "user_challenge_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_reps", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("target_reps", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "participant_counted",
            sa.Boolean(),
            nullable=False,
            server_default="false",
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.challenge_id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "challenge_id", "user_id", name="uq_user_challenge_progress"
        ),
    )
    op.create_index(
        op.f("ix_user_challenge_progress_challenge_id"),
        "user_challenge_progress",
        ["challenge_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_user_challenge_progress_user_id"),
        "user_challenge_progress",
        ["user_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(
        op.f("ix_user_challenge_progress_user_id"), table_name="user_challenge_progress"
    )
    op.drop_index(
        op.f("ix_user_challenge_progress_challenge_id"),
        table_name="user_challenge_progress",
    )
    op.drop_table("user_challenge_progress")
    op.drop_index(
        op.f("ix_user_challenge_task_progress_challenge_id"),
        table_name="user_challenge_task_progress",
    )
    op.drop_index(
        op.f("ix_user_challenge_task_progress_task_id"),
        table_name="user_challenge_task_progress",
    )
    op.drop_index(
        op.f("ix_user_challenge_task_progress_user_id"),
        table_name="user_challenge_task_progress",
    )
    op.drop_table("user_challenge_task_progress")
    op.drop_index(op.f("ix_challenge_tasks_challenge_id"), table_name="challenge_tasks")
    op.drop_table("challenge_tasks")
    op.drop_table("challenges")
