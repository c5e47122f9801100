"""
TaskDefinition Pydantic schemas.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from selection_pipeline.schemas.base import RecordRead
from selection_pipeline.schemas.common import TaskType


class TaskDefinitionCreate(BaseModel):
    """Schema for creating a task definition inside one stage."""
    
    name: str
    display_name: str
    description: str = ""
    task_type: TaskType = "general"
    sort_order: Optional[int] = None
    is_required: bool = True
    is_active: bool = True
    due_offset_days: Optional[int] = None
    email_template_id: Optional[str] = None


class TaskDefinitionUpdate(BaseModel):
    """Schema for updating a task definition. All fields optional."""
    
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    task_type: Optional[TaskType] = None
    sort_order: Optional[int] = None
    is_required: Optional[bool] = None
    is_active: Optional[bool] = None
    due_offset_days: Optional[int] = None
    email_template_id: Optional[str] = None


class TaskDefinitionRead(RecordRead):
    """Schema for reading task definition data (API response)."""
    
    stage_id: UUID
    name: str
    display_name: str
    description: str
    task_type: TaskType
    sort_order: int
    is_required: bool
    is_active: bool
    due_offset_days: Optional[int] = None
    email_template_id: Optional[str] = None


class TaskDuplicateRequest(BaseModel):
    new_name: Optional[str] = None
