"""
Status definition business logic.

Each stage owns an ordered set of statuses. A stage with no stored statuses
reads as its default template (see status_templates); nothing is persisted
until an administrator creates statuses explicitly or from a template.
"""

import logging
from collections import Counter, defaultdict
from typing import Dict, List, Optional
from uuid import UUID

from selection_pipeline.db.store import STATUS_DEFINITIONS, DataStore
from selection_pipeline.errors import NotFoundError, ValidationError
from selection_pipeline.schemas.common import IntegrityReport, SortOrderUpdate, StatusStatistics
from selection_pipeline.schemas.stage_definition import StageDefinitionRead
from selection_pipeline.schemas.status_definition import (
    StatusDefinitionCreate,
    StatusDefinitionRead,
    StatusDefinitionUpdate,
)
from selection_pipeline.services import catalog
from selection_pipeline.services.stage_definition_service import StageDefinitionService
from selection_pipeline.services.status_templates import (
    CATEGORY_COLORS,
    STATUS_TEMPLATES,
    template_statuses,
)

logger = logging.getLogger(__name__)


def default_statuses(stage: StageDefinitionRead) -> List[StatusDefinitionRead]:
    """Synthesize (without storing) the statuses of a stage's template."""
    return [
        StatusDefinitionRead(stage_id=stage.id, is_default=True, **entry)
        for entry in template_statuses(stage.status_template)
    ]


class StatusDefinitionService:
    """Service for per-stage status definitions."""

    def __init__(self, store: DataStore):
        self.store = store
        self.stages = StageDefinitionService(store)

    async def _stored_for_stage(self, stage_id: UUID) -> List[dict]:
        return await self.store.query(
            STATUS_DEFINITIONS,
            filters={"stage_id": stage_id},
            order_by=catalog.CATALOG_ORDER,
        )

    async def list_for_stage(self, stage_id: UUID, include_inactive: bool = False) -> List[StatusDefinitionRead]:
        """
        Statuses of a stage ordered by sort_order.

        Falls back to the stage's default template when nothing is stored.
        Raises NotFoundError for an unknown stage.
        """
        stage = await self.stages.get_by_id(stage_id)
        rows = await self._stored_for_stage(stage_id)
        if not rows:
            return default_statuses(stage)
        return [
            StatusDefinitionRead.model_validate(row)
            for row in rows
            if include_inactive or row["is_active"]
        ]

    async def get_by_id(self, status_id: UUID) -> StatusDefinitionRead:
        row = await self.store.get_one(STATUS_DEFINITIONS, status_id)
        if row is None:
            raise NotFoundError(STATUS_DEFINITIONS, status_id)
        return StatusDefinitionRead.model_validate(row)

    def _validate_fields(self, errors: List[str], fields: dict, creating: bool) -> None:
        if creating or "status_value" in fields:
            catalog.check_text(errors, fields.get("status_value"), "status_value", 50, required=True)
        if creating or "display_name" in fields:
            catalog.check_text(errors, fields.get("display_name"), "display_name", 100, required=True)
        catalog.check_range(errors, fields.get("sort_order"), "sort_order", 0)

    @staticmethod
    def _check_value_available(
        errors: List[str],
        rows: List[dict],
        value: Optional[str],
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if not value or not value.strip():
            return
        if any(row["status_value"] == value and row["id"] != exclude_id for row in rows):
            errors.append(f"status value '{value}' already exists in this stage")

    async def create(self, stage_id: UUID, data: StatusDefinitionCreate) -> StatusDefinitionRead:
        await self.stages.get_by_id(stage_id)
        existing = await self._stored_for_stage(stage_id)

        fields = data.model_dump()
        errors: List[str] = []
        self._validate_fields(errors, fields, creating=True)
        self._check_value_available(errors, existing, data.status_value)
        catalog.raise_if_invalid(errors)

        fields["stage_id"] = stage_id
        if fields["color_scheme"] is None:
            fields["color_scheme"] = CATEGORY_COLORS[data.status_category]
        if fields["sort_order"] is None:
            fields["sort_order"] = catalog.next_sort_order(existing)

        row = await self.store.insert(STATUS_DEFINITIONS, fields)
        logger.info("Created status %s for stage %s", row["status_value"], stage_id)
        return StatusDefinitionRead.model_validate(row)

    async def update(self, status_id: UUID, data: StatusDefinitionUpdate) -> StatusDefinitionRead:
        existing = await self.get_by_id(status_id)
        changes = catalog.drop_unset(data.model_dump(exclude_unset=True))

        errors: List[str] = []
        self._validate_fields(errors, changes, creating=False)
        if "status_value" in changes:
            siblings = await self._stored_for_stage(existing.stage_id)
            self._check_value_available(errors, siblings, changes["status_value"], exclude_id=status_id)
        catalog.raise_if_invalid(errors)

        row = await self.store.update(STATUS_DEFINITIONS, status_id, changes)
        logger.info("Updated status %s", status_id)
        return StatusDefinitionRead.model_validate(row)

    async def delete(self, status_id: UUID) -> StatusDefinitionRead:
        await self.get_by_id(status_id)
        row = await self.store.update(STATUS_DEFINITIONS, status_id, {"is_active": False})
        logger.info("Deactivated status %s", status_id)
        return StatusDefinitionRead.model_validate(row)

    async def reorder(self, items: List[SortOrderUpdate]) -> None:
        await catalog.reorder(self.store, STATUS_DEFINITIONS, items)

    async def create_from_template(self, template_key: str, stage_id: UUID) -> List[StatusDefinitionRead]:
        """
        Store every status of a template for a stage.

        New rows are numbered after the highest existing sort_order. Fails
        without writing when the key is unknown or a value already exists.
        """
        if template_key not in STATUS_TEMPLATES:
            raise ValidationError([f"unknown status template: {template_key}"])
        await self.stages.get_by_id(stage_id)
        existing = await self._stored_for_stage(stage_id)

        errors: List[str] = []
        entries = template_statuses(template_key)
        for entry in entries:
            self._check_value_available(errors, existing, entry["status_value"])
        catalog.raise_if_invalid(errors)

        base = catalog.next_sort_order(existing)
        created = []
        async with self.store.transaction():
            for index, entry in enumerate(entries):
                row = await self.store.insert(
                    STATUS_DEFINITIONS,
                    {**entry, "stage_id": stage_id, "sort_order": base + index, "is_active": True},
                )
                created.append(StatusDefinitionRead.model_validate(row))

        logger.info("Created %d statuses from template %s for stage %s", len(created), template_key, stage_id)
        return created

    async def validate_status_set(self, stage_id: UUID) -> IntegrityReport:
        """A usable set has a passed status and a failed or declined one."""
        statuses = await self.list_for_stage(stage_id)
        errors: List[str] = []

        if not statuses:
            errors.append("at least one status is required")
        categories = {status.status_category for status in statuses}
        if statuses and "passed" not in categories:
            errors.append("a passed status is required")
        if statuses and not categories & {"failed", "declined"}:
            errors.append("a failed or declined status is required")

        return IntegrityReport(is_valid=not errors, errors=errors)

    async def status_statistics(self) -> StatusStatistics:
        """Active status counts by category and by stage name, defaults included."""
        stages = await self.stages.list_all()
        rows = await self.store.query(STATUS_DEFINITIONS, order_by=catalog.CATALOG_ORDER)
        stored: Dict[UUID, List[dict]] = defaultdict(list)
        for row in rows:
            stored[row["stage_id"]].append(row)

        by_category: Counter = Counter()
        by_stage: Dict[str, int] = {}
        for stage in stages:
            if stored.get(stage.id):
                statuses = [
                    StatusDefinitionRead.model_validate(row) for row in stored[stage.id] if row["is_active"]
                ]
            else:
                statuses = default_statuses(stage)
            by_stage[stage.name] = len(statuses)
            by_category.update(status.status_category for status in statuses)

        return StatusStatistics(
            total_statuses=sum(by_stage.values()),
            statuses_by_category=dict(by_category),
            statuses_by_stage=by_stage,
        )
