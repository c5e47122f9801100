"""
StageTransitionRule Pydantic schemas.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from selection_pipeline.schemas.base import RecordRead


class TransitionRuleCreate(BaseModel):
    """
    Schema for creating a transition rule.
    
    condition_type is a plain string so an unknown value is reported as a
    validation message rather than a parse failure.
    """
    
    from_stage_id: UUID
    to_stage_id: UUID
    condition_type: str
    condition_config: Dict[str, Any] = Field(default_factory=dict)


class TransitionRuleRead(RecordRead):
    from_stage_id: UUID
    to_stage_id: UUID
    condition_type: str
    condition_config: Dict[str, Any] = Field(default_factory=dict)


class TransitionCheck(BaseModel):
    """Outcome of evaluating whether an applicant may move between stages."""
    
    can_transition: bool
    reason: Optional[str] = None
