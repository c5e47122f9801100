"""
TaskInstance Pydantic schemas and the merged per-applicant task record.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from selection_pipeline.schemas.base import RecordRead
from selection_pipeline.schemas.common import TaskType


class TaskInstanceRead(RecordRead):
    """Schema for reading a persisted task instance."""
    
    applicant_id: UUID
    task_id: UUID
    status: str
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    notes: str = ""


class TaskInstanceUpdate(BaseModel):
    """Partial mutation of an applicant's task. Unset fields are left alone."""
    
    status: Optional[str] = None
    notes: Optional[str] = None
    due_date: Optional[date] = None


class ApplicantTask(BaseModel):
    """
    One task definition merged with the applicant's instance of it.
    
    is_virtual=True means no instance is stored yet; instance_id is None
    until the first mutation persists one.
    """
    
    # Definition side
    task_id: UUID
    stage_id: UUID
    name: str
    display_name: str
    description: str
    task_type: TaskType
    sort_order: int
    is_required: bool
    due_offset_days: Optional[int] = None
    email_template_id: Optional[str] = None
    
    # Instance side
    applicant_id: UUID
    instance_id: Optional[UUID] = None
    is_virtual: bool
    status: str
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    notes: str = ""


class TaskEmailRequest(BaseModel):
    """Payload handed to the notification sender for an email task."""
    
    recipient: str
    subject: str
    body: str
