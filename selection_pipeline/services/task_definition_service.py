"""
Task definition business logic.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, get_args
from uuid import UUID

from selection_pipeline.db.store import STAGE_DEFINITIONS, TASK_DEFINITIONS, DataStore
from selection_pipeline.errors import NotFoundError
from selection_pipeline.schemas.common import SortOrderUpdate, TaskType
from selection_pipeline.schemas.task_definition import (
    TaskDefinitionCreate,
    TaskDefinitionRead,
    TaskDefinitionUpdate,
)
from selection_pipeline.services import catalog
from selection_pipeline.services.stage_definition_service import StageDefinitionService

logger = logging.getLogger(__name__)

# Fields carried over by duplicate(); identity, stage and name are set separately
COPIED_FIELDS = (
    "display_name",
    "description",
    "task_type",
    "is_required",
    "is_active",
    "due_offset_days",
    "email_template_id",
)


class TaskDefinitionService:
    """Service for the fixed tasks attached to each stage."""

    def __init__(self, store: DataStore):
        self.store = store
        self.stages = StageDefinitionService(store)

    async def _stored_for_stage(self, stage_id: UUID) -> List[dict]:
        return await self.store.query(
            TASK_DEFINITIONS,
            filters={"stage_id": stage_id},
            order_by=catalog.CATALOG_ORDER,
        )

    async def list_for_stage(self, stage_id: UUID, include_inactive: bool = False) -> List[TaskDefinitionRead]:
        """Tasks of a stage ordered by sort_order. Raises NotFoundError for an unknown stage."""
        await self.stages.get_by_id(stage_id)
        rows = await self._stored_for_stage(stage_id)
        return [
            TaskDefinitionRead.model_validate(row)
            for row in rows
            if include_inactive or row["is_active"]
        ]

    async def list_for_stage_name(self, stage_name: str, include_inactive: bool = False) -> List[TaskDefinitionRead]:
        stage = await self.stages.find_by_name(stage_name)
        if stage is None:
            raise NotFoundError(STAGE_DEFINITIONS, stage_name, message=f"no active stage named '{stage_name}'")
        return await self.list_for_stage(stage.id, include_inactive=include_inactive)

    async def get_by_id(self, task_id: UUID) -> TaskDefinitionRead:
        row = await self.store.get_one(TASK_DEFINITIONS, task_id)
        if row is None:
            raise NotFoundError(TASK_DEFINITIONS, task_id)
        return TaskDefinitionRead.model_validate(row)

    def _validate_fields(self, errors: List[str], fields: dict, creating: bool) -> None:
        if creating or "name" in fields:
            catalog.check_text(errors, fields.get("name"), "name", 100, required=True)
        if creating or "display_name" in fields:
            catalog.check_text(errors, fields.get("display_name"), "display_name", 100, required=True)
        catalog.check_text(errors, fields.get("description"), "description", 500)
        catalog.check_range(errors, fields.get("due_offset_days"), "due_offset_days", 0, 365)
        catalog.check_range(errors, fields.get("sort_order"), "sort_order", 0)

    @staticmethod
    def _check_name_available(
        errors: List[str],
        rows: List[dict],
        name: Optional[str],
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if not name or not name.strip():
            return
        if any(row["name"] == name and row["id"] != exclude_id for row in rows):
            errors.append(f"task name '{name}' already exists in this stage")

    async def create(self, stage_id: UUID, data: TaskDefinitionCreate) -> TaskDefinitionRead:
        await self.stages.get_by_id(stage_id)
        existing = await self._stored_for_stage(stage_id)

        fields = data.model_dump()
        errors: List[str] = []
        self._validate_fields(errors, fields, creating=True)
        self._check_name_available(errors, existing, data.name)
        catalog.raise_if_invalid(errors)

        fields["stage_id"] = stage_id
        if fields["sort_order"] is None:
            fields["sort_order"] = catalog.next_sort_order(existing)

        row = await self.store.insert(TASK_DEFINITIONS, fields)
        logger.info("Created task %s (%s) for stage %s", row["id"], row["name"], stage_id)
        return TaskDefinitionRead.model_validate(row)

    async def update(self, task_id: UUID, data: TaskDefinitionUpdate) -> TaskDefinitionRead:
        existing = await self.get_by_id(task_id)
        changes = catalog.drop_unset(data.model_dump(exclude_unset=True))

        errors: List[str] = []
        self._validate_fields(errors, changes, creating=False)
        if "name" in changes:
            siblings = await self._stored_for_stage(existing.stage_id)
            self._check_name_available(errors, siblings, changes["name"], exclude_id=task_id)
        catalog.raise_if_invalid(errors)

        row = await self.store.update(TASK_DEFINITIONS, task_id, changes)
        logger.info("Updated task %s", task_id)
        return TaskDefinitionRead.model_validate(row)

    async def delete(self, task_id: UUID) -> TaskDefinitionRead:
        await self.get_by_id(task_id)
        row = await self.store.update(TASK_DEFINITIONS, task_id, {"is_active": False})
        logger.info("Deactivated task %s", task_id)
        return TaskDefinitionRead.model_validate(row)

    async def reorder(self, items: List[SortOrderUpdate]) -> None:
        await catalog.reorder(self.store, TASK_DEFINITIONS, items)

    async def duplicate(self, source_id: UUID, new_name: Optional[str] = None) -> TaskDefinitionRead:
        """Copy a task within its stage, placed after every existing task."""
        source = await self.get_by_id(source_id)
        name = new_name or f"{source.name}_copy"
        siblings = await self._stored_for_stage(source.stage_id)

        errors: List[str] = []
        catalog.check_text(errors, name, "name", 100, required=True)
        self._check_name_available(errors, siblings, name)
        catalog.raise_if_invalid(errors)

        fields = {field: getattr(source, field) for field in COPIED_FIELDS}
        fields.update(
            stage_id=source.stage_id,
            name=name,
            sort_order=catalog.next_sort_order(siblings),
        )
        row = await self.store.insert(TASK_DEFINITIONS, fields)
        logger.info("Duplicated task %s as %s (%s)", source_id, row["id"], name)
        return TaskDefinitionRead.model_validate(row)

    async def task_type_statistics(self) -> Dict[str, int]:
        """Active task definitions counted per task type; every type is listed."""
        rows = await self.store.query(TASK_DEFINITIONS, filters={"is_active": True})
        counts = Counter(row["task_type"] for row in rows)
        return {task_type: counts.get(task_type, 0) for task_type in get_args(TaskType)}
