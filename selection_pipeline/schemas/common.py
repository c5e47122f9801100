"""
Shared vocabularies and small payloads used across the stage catalog.
"""

from datetime import datetime
from typing import Dict, List, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field


StageGroup = Literal["entry", "internship", "selection", "other"]

ColorScheme = Literal[
    "blue", "purple", "indigo", "lime", "yellow", "orange", "red", "amber",
    "teal", "cyan", "pink", "violet", "emerald", "gray", "green",
]

SessionType = Literal["in_person", "online", "hybrid"]

StatusTemplateKey = Literal["basic", "interview", "event", "final", "offer"]

StatusCategory = Literal["passed", "failed", "pending", "declined", "cancelled"]

TaskType = Literal[
    "email",
    "document",
    "general",
    "interview",
    "evaluation",
    "scheduling_contact",
    "reminder",
    "document_submission",
]

# Typed scalar values allowed in StageDefinition.extensions
ExtensionValue = Union[bool, int, float, str]


class SortOrderUpdate(BaseModel):
    """One entry of a batch reorder request."""
    
    id: UUID
    sort_order: int


class ReorderRequest(BaseModel):
    items: List[SortOrderUpdate] = Field(default_factory=list)


class IntegrityReport(BaseModel):
    """Result of a configuration consistency check."""
    
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ConfigSummary(BaseModel):
    total_stages: int
    active_stages: int
    total_tasks: int
    total_statuses: int
    last_updated: datetime


class StatusStatistics(BaseModel):
    total_statuses: int
    statuses_by_category: Dict[str, int]
    statuses_by_stage: Dict[str, int]
