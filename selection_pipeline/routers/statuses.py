"""
Status router - API endpoints for per-stage status definitions.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from selection_pipeline.core.dependencies import get_store
from selection_pipeline.db.store import DataStore
from selection_pipeline.schemas.common import IntegrityReport, ReorderRequest, StatusStatistics
from selection_pipeline.schemas.status_definition import (
    StatusDefinitionCreate,
    StatusDefinitionRead,
    StatusDefinitionUpdate,
)
from selection_pipeline.services.status_definition_service import StatusDefinitionService

router = APIRouter(tags=["statuses"])


@router.get("/stages/{stage_id}/statuses", response_model=List[StatusDefinitionRead])
async def list_stage_statuses(
    stage_id: UUID,
    include_inactive: bool = False,
    store: DataStore = Depends(get_store),
):
    """
    List a stage's statuses by sort_order.
    
    A stage with nothing stored returns its default template (is_default=True).
    """
    return await StatusDefinitionService(store).list_for_stage(stage_id, include_inactive=include_inactive)


@router.post(
    "/stages/{stage_id}/statuses",
    response_model=StatusDefinitionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_stage_status(
    stage_id: UUID,
    data: StatusDefinitionCreate,
    store: DataStore = Depends(get_store),
):
    return await StatusDefinitionService(store).create(stage_id, data)


@router.post(
    "/stages/{stage_id}/statuses/templates/{template_key}",
    response_model=List[StatusDefinitionRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_statuses_from_template(
    stage_id: UUID,
    template_key: str,
    store: DataStore = Depends(get_store),
):
    """Store every status of a named template for the stage."""
    return await StatusDefinitionService(store).create_from_template(template_key, stage_id)


@router.get("/stages/{stage_id}/statuses/validation", response_model=IntegrityReport)
async def validate_stage_statuses(
    stage_id: UUID,
    store: DataStore = Depends(get_store),
):
    return await StatusDefinitionService(store).validate_status_set(stage_id)


@router.get("/statuses/statistics", response_model=StatusStatistics)
async def status_statistics(store: DataStore = Depends(get_store)):
    return await StatusDefinitionService(store).status_statistics()


@router.post("/statuses/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_statuses(
    data: ReorderRequest,
    store: DataStore = Depends(get_store),
):
    await StatusDefinitionService(store).reorder(data.items)


@router.patch("/statuses/{status_id}", response_model=StatusDefinitionRead)
async def update_status_definition(
    status_id: UUID,
    data: StatusDefinitionUpdate,
    store: DataStore = Depends(get_store),
):
    return await StatusDefinitionService(store).update(status_id, data)


@router.delete("/statuses/{status_id}", response_model=StatusDefinitionRead)
async def delete_status_definition(
    status_id: UUID,
    store: DataStore = Depends(get_store),
):
    """Deactivate a status definition."""
    return await StatusDefinitionService(store).delete(status_id)
