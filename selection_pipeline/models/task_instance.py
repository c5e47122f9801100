"""
TaskInstance model.

The per-applicant, per-task record of progress. At most one row per
(applicant_id, task_id); the application enforces it, the table does not.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class TaskInstance(TimestampedModel):
    """TaskInstance table - persisted on first mutation, never deleted."""
    
    __tablename__ = "task_instances"
    
    applicant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )
    
    task_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("task_definitions.id"),
        nullable=False,
    )
    
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="not_started",
    )
    
    due_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )
    
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    
    notes: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    
    __table_args__ = (
        Index("ix_task_instances_applicant_task", "applicant_id", "task_id"),
    )
