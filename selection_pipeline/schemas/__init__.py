"""
Schemas package.

Import all schemas here for easy access.
"""

from selection_pipeline.schemas.common import (
    ConfigSummary,
    IntegrityReport,
    ReorderRequest,
    SortOrderUpdate,
    StatusStatistics,
)
from selection_pipeline.schemas.stage_definition import (
    StageDefinitionCreate,
    StageDefinitionUpdate,
    StageDefinitionRead,
)
from selection_pipeline.schemas.status_definition import (
    StatusDefinitionCreate,
    StatusDefinitionUpdate,
    StatusDefinitionRead,
)
from selection_pipeline.schemas.task_definition import (
    TaskDefinitionCreate,
    TaskDefinitionUpdate,
    TaskDefinitionRead,
    TaskDuplicateRequest,
)
from selection_pipeline.schemas.task_instance import (
    ApplicantTask,
    TaskEmailRequest,
    TaskInstanceRead,
    TaskInstanceUpdate,
)
from selection_pipeline.schemas.stage_progress import StageCompletion, StageNotes, StageProgressRead
from selection_pipeline.schemas.transition_rule import (
    TransitionCheck,
    TransitionRuleCreate,
    TransitionRuleRead,
)

__all__ = [
    "ConfigSummary",
    "IntegrityReport",
    "ReorderRequest",
    "SortOrderUpdate",
    "StatusStatistics",
    "StageDefinitionCreate",
    "StageDefinitionUpdate",
    "StageDefinitionRead",
    "StatusDefinitionCreate",
    "StatusDefinitionUpdate",
    "StatusDefinitionRead",
    "TaskDefinitionCreate",
    "TaskDefinitionUpdate",
    "TaskDefinitionRead",
    "TaskDuplicateRequest",
    "ApplicantTask",
    "TaskEmailRequest",
    "TaskInstanceRead",
    "TaskInstanceUpdate",
    "StageCompletion",
    "StageNotes",
    "StageProgressRead",
    "TransitionCheck",
    "TransitionRuleCreate",
    "TransitionRuleRead",
]
