"""
Stage router - API endpoints for the stage catalog.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from selection_pipeline.core.dependencies import get_store
from selection_pipeline.db.store import STAGE_DEFINITIONS, DataStore
from selection_pipeline.errors import NotFoundError
from selection_pipeline.schemas.common import ConfigSummary, IntegrityReport, ReorderRequest, StageGroup
from selection_pipeline.schemas.stage_definition import (
    StageDefinitionCreate,
    StageDefinitionRead,
    StageDefinitionUpdate,
)
from selection_pipeline.services.stage_definition_service import StageDefinitionService

router = APIRouter(prefix="/stages", tags=["stages"])


@router.get("", response_model=List[StageDefinitionRead])
async def list_stages(
    active_only: bool = False,
    store: DataStore = Depends(get_store),
):
    """List stages in catalog order (sort_order, then creation time)."""
    service = StageDefinitionService(store)
    if active_only:
        return await service.list_active()
    return await service.list_all()


@router.post("", response_model=StageDefinitionRead, status_code=status.HTTP_201_CREATED)
async def create_stage(
    data: StageDefinitionCreate,
    store: DataStore = Depends(get_store),
):
    """Create a new stage."""
    return await StageDefinitionService(store).create(data)


@router.get("/summary", response_model=ConfigSummary)
async def stage_summary(store: DataStore = Depends(get_store)):
    return await StageDefinitionService(store).config_summary()


@router.get("/integrity", response_model=IntegrityReport)
async def stage_integrity(store: DataStore = Depends(get_store)):
    """Duplicate names are errors; empty catalog and duplicate sort orders are warnings."""
    return await StageDefinitionService(store).validate_integrity()


@router.post("/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_stages(
    data: ReorderRequest,
    store: DataStore = Depends(get_store),
):
    """Apply a batch of sort orders atomically."""
    await StageDefinitionService(store).reorder(data.items)


@router.get("/groups", response_model=List[str])
async def list_stage_groups(store: DataStore = Depends(get_store)):
    """Distinct groups used by the active stages."""
    return await StageDefinitionService(store).list_stage_groups()


@router.get("/groups/{stage_group}", response_model=List[StageDefinitionRead])
async def list_stages_in_group(
    stage_group: StageGroup,
    store: DataStore = Depends(get_store),
):
    return await StageDefinitionService(store).list_by_group(stage_group)


@router.get("/requiring-session", response_model=List[StageDefinitionRead])
async def list_stages_requiring_session(store: DataStore = Depends(get_store)):
    return await StageDefinitionService(store).list_requiring_session()


@router.get("/by-name/{name}", response_model=StageDefinitionRead)
async def get_stage_by_name(
    name: str,
    store: DataStore = Depends(get_store),
):
    """Get the active stage with this name."""
    stage = await StageDefinitionService(store).find_by_name(name)
    if stage is None:
        raise NotFoundError(STAGE_DEFINITIONS, name, message=f"no active stage named '{name}'")
    return stage


@router.get("/{stage_id}", response_model=StageDefinitionRead)
async def get_stage(
    stage_id: UUID,
    store: DataStore = Depends(get_store),
):
    """Get a stage by ID."""
    return await StageDefinitionService(store).get_by_id(stage_id)


@router.patch("/{stage_id}", response_model=StageDefinitionRead)
async def update_stage(
    stage_id: UUID,
    data: StageDefinitionUpdate,
    store: DataStore = Depends(get_store),
):
    """Update a stage. Bumps its config_version."""
    return await StageDefinitionService(store).update(stage_id, data)


@router.delete("/{stage_id}", response_model=StageDefinitionRead)
async def delete_stage(
    stage_id: UUID,
    store: DataStore = Depends(get_store),
):
    """Deactivate a stage. Stages are never physically removed."""
    return await StageDefinitionService(store).delete(stage_id)
