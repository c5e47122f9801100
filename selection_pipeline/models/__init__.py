"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from selection_pipeline.models.stage_definition import StageDefinition
from selection_pipeline.models.status_definition import StatusDefinition
from selection_pipeline.models.task_definition import TaskDefinition
from selection_pipeline.models.task_instance import TaskInstance
from selection_pipeline.models.stage_progress import StageProgress
from selection_pipeline.models.applicant_stage_pointer import ApplicantStagePointer
from selection_pipeline.models.stage_transition_rule import StageTransitionRule

# Export all models
__all__ = [
    "StageDefinition",
    "StatusDefinition",
    "TaskDefinition",
    "TaskInstance",
    "StageProgress",
    "ApplicantStagePointer",
    "StageTransitionRule",
]
