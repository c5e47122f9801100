"""
StageProgress Pydantic schemas.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

from selection_pipeline.schemas.base import RecordRead


StageProgressStatus = Literal["pending", "in_progress", "completed", "failed", "skipped"]


class StageProgressRead(RecordRead):
    """Schema for reading one attempt at a stage."""
    
    applicant_id: UUID
    stage_id: UUID
    status: StageProgressStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    score: Optional[float] = None
    notes: Optional[str] = None


class StageCompletion(BaseModel):
    score: Optional[float] = None
    notes: Optional[str] = None


class StageNotes(BaseModel):
    notes: Optional[str] = None
