"""
StageDefinition Pydantic schemas.

Length and range limits are checked by the service so every violation is
reported together; the schemas only pin down types and vocabularies.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from selection_pipeline.schemas.base import RecordRead
from selection_pipeline.schemas.common import (
    ColorScheme,
    ExtensionValue,
    SessionType,
    StageGroup,
    StatusTemplateKey,
)


class StageDefinitionCreate(BaseModel):
    """Schema for creating a new stage definition."""
    
    name: str
    display_name: str
    description: str = ""
    stage_group: StageGroup = "other"
    sort_order: int = 0
    is_active: bool = True
    color_scheme: Optional[ColorScheme] = None
    icon: str = ""
    estimated_duration_minutes: Optional[int] = None
    requires_session: bool = False
    session_types: List[SessionType] = Field(default_factory=list)
    status_template: Optional[StatusTemplateKey] = None
    extensions: Dict[str, ExtensionValue] = Field(default_factory=dict)


class StageDefinitionUpdate(BaseModel):
    """Schema for updating a stage definition. All fields optional."""
    
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    stage_group: Optional[StageGroup] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    color_scheme: Optional[ColorScheme] = None
    icon: Optional[str] = None
    estimated_duration_minutes: Optional[int] = None
    requires_session: Optional[bool] = None
    session_types: Optional[List[SessionType]] = None
    status_template: Optional[StatusTemplateKey] = None
    extensions: Optional[Dict[str, ExtensionValue]] = None


class StageDefinitionRead(RecordRead):
    """Schema for reading stage definition data (API response)."""
    
    name: str
    display_name: str
    description: str
    stage_group: StageGroup
    sort_order: int
    is_active: bool
    color_scheme: ColorScheme
    icon: str
    estimated_duration_minutes: int
    requires_session: bool
    session_types: List[SessionType]
    status_template: StatusTemplateKey
    config_version: int
    extensions: Dict[str, ExtensionValue]
