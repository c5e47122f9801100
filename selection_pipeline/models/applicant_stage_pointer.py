"""
ApplicantStagePointer model.

Explicit pointer to an applicant's current StageProgress row, written in
the same transaction as the row it points to.
"""

import uuid

from sqlalchemy import ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class ApplicantStagePointer(TimestampedModel):
    """ApplicantStagePointer table - one row per applicant."""
    
    __tablename__ = "applicant_stage_pointers"
    
    applicant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        unique=True,
    )
    
    current_progress_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stage_progress.id"),
        nullable=False,
    )
