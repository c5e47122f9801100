"""
StageDefinition model.

Represents one step of the selection pipeline (entry, document screening,
interviews, offer, ...).
"""

from sqlalchemy import String, Text, Integer, Boolean, Index, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.models.base_model import TimestampedModel


class StageDefinition(TimestampedModel):
    """
    StageDefinition table - the ordered stage catalog.
    
    Rows are never physically removed; deleting a stage flips is_active.
    sort_order defines catalog order and ties break by created_at.
    """
    
    __tablename__ = "stage_definitions"
    
    # Internal key (e.g. "document_screening"), unique among active stages
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
    
    stage_group: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="other",
    )  # entry, internship, selection, other
    
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
    
    color_scheme: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="blue",
    )
    
    icon: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
    )
    
    estimated_duration_minutes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=60,
    )
    
    requires_session: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    
    # Allowed session formats, e.g. ["in_person", "online"]
    session_types: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        server_default="[]",
    )
    
    # Default status set used while no status definitions are stored
    status_template: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="basic",
    )
    
    # Incremented on every update, including soft delete
    config_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
    
    # Forward-compatible scalar extension fields
    extensions: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default="{}",
    )
    
    __table_args__ = (
        Index(
            "uq_stage_definitions_active_name",
            "name",
            unique=True,
            postgresql_where=text("is_active"),
        ),
        Index("ix_stage_definitions_sort_order", "sort_order", "created_at"),
    )
