"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RecordRead(BaseModel):
    """
    Base schema for reading stored rows.
    
    Includes the store-assigned fields: id and timestamps.
    """
    
    id: UUID
    created_at: datetime
    updated_at: datetime
    
    # Rows come back from the store as dicts or ORM objects
    model_config = ConfigDict(from_attributes=True)
