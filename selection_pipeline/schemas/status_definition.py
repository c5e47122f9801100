"""
StatusDefinition Pydantic schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from selection_pipeline.schemas.common import ColorScheme, StatusCategory


class StatusDefinitionCreate(BaseModel):
    """Schema for creating a status definition inside one stage."""
    
    status_value: str
    display_name: str
    status_category: StatusCategory
    color_scheme: Optional[ColorScheme] = None
    sort_order: Optional[int] = None
    is_active: bool = True
    is_final: bool = False


class StatusDefinitionUpdate(BaseModel):
    """Schema for updating a status definition. All fields optional."""
    
    status_value: Optional[str] = None
    display_name: Optional[str] = None
    status_category: Optional[StatusCategory] = None
    color_scheme: Optional[ColorScheme] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    is_final: Optional[bool] = None


class StatusDefinitionRead(BaseModel):
    """
    Schema for reading status definitions.
    
    Defaults synthesized from a stage's template are not stored, so they
    carry no id or timestamps and have is_default=True.
    """
    
    id: Optional[UUID] = None
    stage_id: UUID
    status_value: str
    display_name: str
    status_category: StatusCategory
    color_scheme: ColorScheme
    sort_order: int
    is_active: bool = True
    is_final: bool = False
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True)
