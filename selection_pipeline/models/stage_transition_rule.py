"""
StageTransitionRule model.

Configured policy for moving an applicant from one stage to another.
"""

import uuid

from sqlalchemy import String, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class StageTransitionRule(TimestampedModel):
    """
    StageTransitionRule table.
    
    The (from_stage_id, to_stage_id) pair is not unique at the table level;
    duplicates are reported by the integrity check and refused by the
    evaluator.
    """
    
    __tablename__ = "stage_transition_rules"
    
    from_stage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stage_definitions.id"),
        nullable=False,
    )
    
    to_stage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stage_definitions.id"),
        nullable=False,
    )
    
    condition_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )  # automatic, manual, conditional
    
    # e.g. {"min_score": 70} for conditional rules
    condition_config: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default="{}",
    )
    
    __table_args__ = (
        Index("ix_stage_transition_rules_pair", "from_stage_id", "to_stage_id"),
    )
