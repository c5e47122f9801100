"""
TaskDefinition model.

Fixed tasks expected during a stage (contact, document collection, result
notification, ...).
"""

import uuid
from typing import Optional

from sqlalchemy import String, Text, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class TaskDefinition(TimestampedModel):
    """TaskDefinition table - the per-stage task catalog."""
    
    __tablename__ = "task_definitions"
    
    stage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stage_definitions.id"),
        nullable=False,
        index=True,
    )
    
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    
    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    
    task_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="general",
    )
    
    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    
    is_required: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    
    # Days after stage start the task is due
    due_offset_days: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    
    # Opaque reference owned by the email template collaborator
    email_template_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    
    __table_args__ = (
        UniqueConstraint("stage_id", "name", name="uq_task_definitions_stage_name"),
    )
