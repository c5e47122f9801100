"""
Stage definition business logic.

Stages form the selection catalog. They are created and edited by
administrators, soft-deleted with ``is_active=False``, and never physically
removed. Every update bumps ``config_version``.
"""

import logging
from collections import Counter
from typing import List, Optional
from uuid import UUID

from selection_pipeline.core.config import settings
from selection_pipeline.db.store import (
    STAGE_DEFINITIONS,
    STATUS_DEFINITIONS,
    TASK_DEFINITIONS,
    DataStore,
)
from selection_pipeline.errors import NotFoundError
from selection_pipeline.schemas.common import (
    ConfigSummary,
    IntegrityReport,
    SortOrderUpdate,
    StageGroup,
)
from selection_pipeline.schemas.stage_definition import (
    StageDefinitionCreate,
    StageDefinitionRead,
    StageDefinitionUpdate,
)
from selection_pipeline.services import catalog
from selection_pipeline.services.status_templates import resolve_status_template
from selection_pipeline.utils.time import utc_now

logger = logging.getLogger(__name__)


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


class StageDefinitionService:
    """Service for the stage catalog."""

    def __init__(self, store: DataStore):
        self.store = store

    async def list_all(self) -> List[StageDefinitionRead]:
        rows = await self.store.query(STAGE_DEFINITIONS, order_by=catalog.CATALOG_ORDER)
        return [StageDefinitionRead.model_validate(row) for row in rows]

    async def list_active(self) -> List[StageDefinitionRead]:
        rows = await self.store.query(
            STAGE_DEFINITIONS,
            filters={"is_active": True},
            order_by=catalog.CATALOG_ORDER,
        )
        return [StageDefinitionRead.model_validate(row) for row in rows]

    async def list_by_group(self, stage_group: StageGroup) -> List[StageDefinitionRead]:
        rows = await self.store.query(
            STAGE_DEFINITIONS,
            filters={"is_active": True, "stage_group": stage_group},
            order_by=catalog.CATALOG_ORDER,
        )
        return [StageDefinitionRead.model_validate(row) for row in rows]

    async def list_requiring_session(self) -> List[StageDefinitionRead]:
        """Active stages that need a scheduled session, in catalog order."""
        rows = await self.store.query(
            STAGE_DEFINITIONS,
            filters={"is_active": True, "requires_session": True},
            order_by=catalog.CATALOG_ORDER,
        )
        return [StageDefinitionRead.model_validate(row) for row in rows]

    async def list_stage_groups(self) -> List[str]:
        """Distinct groups of the active stages, in order of first appearance in the catalog."""
        return _unique([stage.stage_group for stage in await self.list_active()])

    async def find_by_name(self, name: str) -> Optional[StageDefinitionRead]:
        """The active stage with this name, or None."""
        rows = await self.store.query(STAGE_DEFINITIONS, filters={"name": name, "is_active": True})
        return StageDefinitionRead.model_validate(rows[0]) if rows else None

    async def find_by_id(self, stage_id: UUID) -> Optional[StageDefinitionRead]:
        row = await self.store.get_one(STAGE_DEFINITIONS, stage_id)
        return StageDefinitionRead.model_validate(row) if row else None

    async def get_by_id(self, stage_id: UUID) -> StageDefinitionRead:
        stage = await self.find_by_id(stage_id)
        if stage is None:
            raise NotFoundError(STAGE_DEFINITIONS, stage_id)
        return stage

    async def _check_name_available(
        self,
        errors: List[str],
        name: Optional[str],
        exclude_id: Optional[UUID] = None,
    ) -> None:
        # Names are unique among active stages; a retired name can be reused
        if not name or not name.strip():
            return
        active = await self.store.query(STAGE_DEFINITIONS, filters={"name": name, "is_active": True})
        if any(row["id"] != exclude_id for row in active):
            errors.append(f"stage name '{name}' already exists")

    def _validate_fields(self, errors: List[str], fields: dict, creating: bool) -> None:
        if creating or "name" in fields:
            catalog.check_text(errors, fields.get("name"), "name", 100, required=True)
        if creating or "display_name" in fields:
            catalog.check_text(errors, fields.get("display_name"), "display_name", 100, required=True)
        catalog.check_text(errors, fields.get("description"), "description", 500)
        catalog.check_range(
            errors, fields.get("estimated_duration_minutes"), "estimated_duration_minutes", 1, 1440
        )
        catalog.check_range(errors, fields.get("sort_order"), "sort_order", 0)

    async def create(self, data: StageDefinitionCreate) -> StageDefinitionRead:
        """Create a stage; the status template is resolved from its name when not given."""
        fields = data.model_dump()
        errors: List[str] = []
        self._validate_fields(errors, fields, creating=True)
        if data.is_active:
            await self._check_name_available(errors, data.name)
        catalog.raise_if_invalid(errors)

        if fields["color_scheme"] is None:
            fields["color_scheme"] = settings.DEFAULT_STAGE_COLOR_SCHEME
        if fields["estimated_duration_minutes"] is None:
            fields["estimated_duration_minutes"] = settings.DEFAULT_STAGE_DURATION_MINUTES
        fields["status_template"] = resolve_status_template(data.name, data.status_template)
        fields["session_types"] = _unique(fields["session_types"])
        fields["config_version"] = 1

        row = await self.store.insert(STAGE_DEFINITIONS, fields)
        logger.info("Created stage %s (%s) with status template %s", row["id"], row["name"], row["status_template"])
        return StageDefinitionRead.model_validate(row)

    async def update(self, stage_id: UUID, data: StageDefinitionUpdate) -> StageDefinitionRead:
        existing = await self.get_by_id(stage_id)
        changes = catalog.drop_unset(data.model_dump(exclude_unset=True))

        errors: List[str] = []
        self._validate_fields(errors, changes, creating=False)
        name = changes.get("name", existing.name)
        will_be_active = changes.get("is_active", existing.is_active)
        if will_be_active and ("name" in changes or not existing.is_active):
            await self._check_name_available(errors, name, exclude_id=stage_id)
        catalog.raise_if_invalid(errors)

        if "session_types" in changes:
            changes["session_types"] = _unique(changes["session_types"])
        changes["config_version"] = existing.config_version + 1

        row = await self.store.update(STAGE_DEFINITIONS, stage_id, changes)
        logger.info("Updated stage %s to config version %d", stage_id, row["config_version"])
        return StageDefinitionRead.model_validate(row)

    async def delete(self, stage_id: UUID) -> StageDefinitionRead:
        """Soft delete: the stage stays in the catalog with is_active=False."""
        existing = await self.get_by_id(stage_id)
        row = await self.store.update(
            STAGE_DEFINITIONS,
            stage_id,
            {"is_active": False, "config_version": existing.config_version + 1},
        )
        logger.info("Deactivated stage %s (%s)", stage_id, existing.name)
        return StageDefinitionRead.model_validate(row)

    async def reorder(self, items: List[SortOrderUpdate]) -> None:
        await catalog.reorder(self.store, STAGE_DEFINITIONS, items, bump_version=True)

    async def config_summary(self) -> ConfigSummary:
        stages = await self.store.query(STAGE_DEFINITIONS)
        tasks = await self.store.query(TASK_DEFINITIONS, filters={"is_active": True})
        statuses = await self.store.query(STATUS_DEFINITIONS, filters={"is_active": True})
        last_updated = max((row["updated_at"] for row in stages), default=None) or utc_now()
        return ConfigSummary(
            total_stages=len(stages),
            active_stages=sum(1 for row in stages if row["is_active"]),
            total_tasks=len(tasks),
            total_statuses=len(statuses),
            last_updated=last_updated,
        )

    async def validate_integrity(self) -> IntegrityReport:
        """
        Check the active catalog for consistency.

        Duplicate names are errors. An empty active catalog and duplicate
        sort orders are warnings.
        """
        active = await self.list_active()
        errors: List[str] = []
        warnings: List[str] = []

        if not active:
            warnings.append("no active stages")

        for name, count in Counter(stage.name for stage in active).items():
            if count > 1:
                errors.append(f"duplicate stage name: {name}")

        for sort_order, count in Counter(stage.sort_order for stage in active).items():
            if count > 1:
                warnings.append(f"duplicate sort order: {sort_order}")

        if errors:
            logger.warning("Stage catalog integrity errors: %s", errors)
        return IntegrityReport(is_valid=not errors, errors=errors, warnings=warnings)
