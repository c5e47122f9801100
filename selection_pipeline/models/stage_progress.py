"""
StageProgress model.

Append/update log of an applicant's passes through stages. Re-attempting a
stage creates a fresh row; history is ordered by started_at, created_at.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Float, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class StageProgress(TimestampedModel):
    """StageProgress table - one row per attempt at a stage."""
    
    __tablename__ = "stage_progress"
    
    applicant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
    )
    
    stage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stage_definitions.id"),
        nullable=False,
    )
    
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
    )  # pending, in_progress, completed, failed, skipped
    
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    
    score: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    __table_args__ = (
        Index("ix_stage_progress_applicant_stage", "applicant_id", "stage_id"),
    )
