"""
Task router - API endpoints for task definitions.
"""

from typing import Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from selection_pipeline.core.dependencies import get_store
from selection_pipeline.db.store import DataStore
from selection_pipeline.schemas.common import ReorderRequest
from selection_pipeline.schemas.task_definition import (
    TaskDefinitionCreate,
    TaskDefinitionRead,
    TaskDefinitionUpdate,
    TaskDuplicateRequest,
)
from selection_pipeline.services.task_definition_service import TaskDefinitionService

router = APIRouter(tags=["tasks"])


@router.get("/stages/{stage_id}/tasks", response_model=List[TaskDefinitionRead])
async def list_stage_tasks(
    stage_id: UUID,
    include_inactive: bool = False,
    store: DataStore = Depends(get_store),
):
    """List a stage's task definitions by sort_order."""
    return await TaskDefinitionService(store).list_for_stage(stage_id, include_inactive=include_inactive)


@router.get("/tasks/by-stage-name/{stage_name}", response_model=List[TaskDefinitionRead])
async def list_tasks_by_stage_name(
    stage_name: str,
    include_inactive: bool = False,
    store: DataStore = Depends(get_store),
):
    """List the task definitions of the active stage with this name."""
    return await TaskDefinitionService(store).list_for_stage_name(stage_name, include_inactive=include_inactive)


@router.post(
    "/stages/{stage_id}/tasks",
    response_model=TaskDefinitionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_stage_task(
    stage_id: UUID,
    data: TaskDefinitionCreate,
    store: DataStore = Depends(get_store),
):
    return await TaskDefinitionService(store).create(stage_id, data)


@router.get("/tasks/statistics", response_model=Dict[str, int])
async def task_type_statistics(store: DataStore = Depends(get_store)):
    """Active task definitions per task type."""
    return await TaskDefinitionService(store).task_type_statistics()


@router.post("/tasks/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_tasks(
    data: ReorderRequest,
    store: DataStore = Depends(get_store),
):
    await TaskDefinitionService(store).reorder(data.items)


@router.patch("/tasks/{task_id}", response_model=TaskDefinitionRead)
async def update_task(
    task_id: UUID,
    data: TaskDefinitionUpdate,
    store: DataStore = Depends(get_store),
):
    return await TaskDefinitionService(store).update(task_id, data)


@router.delete("/tasks/{task_id}", response_model=TaskDefinitionRead)
async def delete_task(
    task_id: UUID,
    store: DataStore = Depends(get_store),
):
    """Deactivate a task definition."""
    return await TaskDefinitionService(store).delete(task_id)


@router.post(
    "/tasks/{task_id}/duplicate",
    response_model=TaskDefinitionRead,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_task(
    task_id: UUID,
    data: TaskDuplicateRequest,
    store: DataStore = Depends(get_store),
):
    """Copy a task within its stage; the name defaults to '<name>_copy'."""
    return await TaskDefinitionService(store).duplicate(task_id, new_name=data.new_name)
