"""
Base model with common fields.

All collection tables inherit from this to get:
- id (UUID primary key)
- created_at (when the record was created)
- updated_at (when the record was last modified)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from selection_pipeline.db.base import Base


class TimestampedModel(Base):
    """
    Abstract base class for all collection tables.
    
    Not a real table; every row-set the data store exposes gets these
    store-assigned fields automatically.
    """
    
    __abstract__ = True
    
    # Primary key, assigned by the store on insert
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    
    # Timestamps - automatically set when records are created/updated
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.clock_timestamp(),
        nullable=False,
    )
