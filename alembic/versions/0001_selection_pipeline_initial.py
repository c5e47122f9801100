"""Initial selection pipeline schema

Revision ID: 0001_selection_pipeline
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_selection_pipeline"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "stage_definitions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("stage_group", sa.String(length=20), nullable=False, server_default="other"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("color_scheme", sa.String(length=20), nullable=False, server_default="blue"),
        sa.Column("icon", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("estimated_duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("requires_session", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("session_types", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("status_template", sa.String(length=20), nullable=False, server_default="basic"),
        sa.Column("config_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("extensions", postgresql.JSONB(), nullable=False, server_default="{}"),
        *_timestamps(),
    )
    op.create_index(
        "uq_stage_definitions_active_name",
        "stage_definitions",
        ["name"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index("ix_stage_definitions_sort_order", "stage_definitions", ["sort_order", "created_at"])

    op.create_table(
        "status_definitions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("stage_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("stage_definitions.id"), nullable=False),
        sa.Column("status_value", sa.String(length=50), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("status_category", sa.String(length=20), nullable=False),
        sa.Column("color_scheme", sa.String(length=20), nullable=False, server_default="blue"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_final", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("stage_id", "status_value", name="uq_status_definitions_stage_value"),
    )
    op.create_index("ix_status_definitions_stage_id", "status_definitions", ["stage_id"])

    op.create_table(
        "task_definitions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("stage_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("stage_definitions.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("task_type", sa.String(length=30), nullable=False, server_default="general"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("due_offset_days", sa.Integer(), nullable=True),
        sa.Column("email_template_id", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("stage_id", "name", name="uq_task_definitions_stage_name"),
    )
    op.create_index("ix_task_definitions_stage_id", "task_definitions", ["stage_id"])

    op.create_table(
        "task_instances",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("applicant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("task_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("task_definitions.id"), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="not_started"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_task_instances_applicant_task", "task_instances", ["applicant_id", "task_id"])

    op.create_table(
        "stage_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("applicant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("stage_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("stage_definitions.id"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_stage_progress_applicant_stage", "stage_progress", ["applicant_id", "stage_id"])

    op.create_table(
        "applicant_stage_pointers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("applicant_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column(
            "current_progress_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("stage_progress.id"),
            nullable=False,
        ),
        *_timestamps(),
    )

    op.create_table(
        "stage_transition_rules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("from_stage_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("stage_definitions.id"), nullable=False),
        sa.Column("to_stage_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("stage_definitions.id"), nullable=False),
        sa.Column("condition_type", sa.String(length=20), nullable=False),
        sa.Column("condition_config", postgresql.JSONB(), nullable=False, server_default="{}"),
        *_timestamps(),
    )
    op.create_index("ix_stage_transition_rules_pair", "stage_transition_rules", ["from_stage_id", "to_stage_id"])


def downgrade() -> None:
    op.drop_table("stage_transition_rules")
    op.drop_table("applicant_stage_pointers")
    op.drop_table("stage_progress")
    op.drop_table("task_instances")
    op.drop_table("task_definitions")
    op.drop_table("status_definitions")
    op.drop_index("uq_stage_definitions_active_name", table_name="stage_definitions")
    op.drop_table("stage_definitions")
