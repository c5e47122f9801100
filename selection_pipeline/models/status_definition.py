"""
StatusDefinition model.

Per-stage catalog of the outcome values an applicant's pass through the
stage can be recorded with.
"""

import uuid

from sqlalchemy import String, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class StatusDefinition(TimestampedModel):
    """StatusDefinition table - permissible status values for one stage."""
    
    __tablename__ = "status_definitions"
    
    stage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stage_definitions.id"),
        nullable=False,
        index=True,
    )
    
    status_value: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    
    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    
    status_category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )  # passed, failed, pending, declined, cancelled
    
    color_scheme: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="blue",
    )
    
    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    
    # True means no further transition is possible from this status
    is_final: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    
    __table_args__ = (
        UniqueConstraint("stage_id", "status_value", name="uq_status_definitions_stage_value"),
    )
