"""
Applicant router - per-applicant tasks, stage progress and transition checks.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from selection_pipeline.core.dependencies import get_notifier, get_store
from selection_pipeline.db.store import DataStore
from selection_pipeline.schemas.stage_progress import StageCompletion, StageNotes, StageProgressRead
from selection_pipeline.schemas.task_instance import (
    ApplicantTask,
    TaskEmailRequest,
    TaskInstanceRead,
    TaskInstanceUpdate,
)
from selection_pipeline.schemas.transition_rule import TransitionCheck
from selection_pipeline.services.notifications import NotificationSender
from selection_pipeline.services.stage_progress_service import StageProgressService
from selection_pipeline.services.task_instance_service import TaskInstanceService
from selection_pipeline.services.task_reconciler import TaskReconciler
from selection_pipeline.services.transition_rule_service import TransitionRuleEvaluator

router = APIRouter(prefix="/applicants/{applicant_id}", tags=["applicants"])


@router.get("/stages/{stage_id}/tasks", response_model=List[ApplicantTask])
async def list_applicant_stage_tasks(
    applicant_id: UUID,
    stage_id: UUID,
    store: DataStore = Depends(get_store),
):
    """
    Every active task of the stage merged with the applicant's instances.
    
    Untouched tasks come back with is_virtual=True and are not stored.
    """
    return await TaskReconciler(store).get_tasks_for_applicant_stage(applicant_id, stage_id)


@router.patch("/tasks/{task_id}", response_model=TaskInstanceRead)
async def update_applicant_task(
    applicant_id: UUID,
    task_id: UUID,
    data: TaskInstanceUpdate,
    store: DataStore = Depends(get_store),
):
    """Update status, notes or due date; the first change stores the instance."""
    return await TaskInstanceService(store).update(applicant_id, task_id, data)


@router.post("/tasks/{task_id}/email", response_model=TaskInstanceRead)
async def send_applicant_task_email(
    applicant_id: UUID,
    task_id: UUID,
    data: TaskEmailRequest,
    store: DataStore = Depends(get_store),
    notifier: NotificationSender = Depends(get_notifier),
):
    """Send the task's message and mark the task done."""
    service = TaskInstanceService(store, notifier=notifier)
    return await service.send_task_email(applicant_id, task_id, data)


@router.get("/progress", response_model=List[StageProgressRead])
async def list_applicant_progress(
    applicant_id: UUID,
    store: DataStore = Depends(get_store),
):
    return await StageProgressService(store).list_progress(applicant_id)


@router.get("/progress/current", response_model=Optional[StageProgressRead])
async def get_applicant_current_progress(
    applicant_id: UUID,
    store: DataStore = Depends(get_store),
):
    return await StageProgressService(store).get_current_progress(applicant_id)


@router.get("/progress/duplicates", response_model=List[UUID])
async def find_applicant_duplicate_progress(
    applicant_id: UUID,
    store: DataStore = Depends(get_store),
):
    """Stage ids where the applicant has more than one active attempt."""
    return await StageProgressService(store).find_duplicate_active_progress(applicant_id)


@router.post("/stages/{stage_id}/start", response_model=StageProgressRead)
async def start_applicant_stage(
    applicant_id: UUID,
    stage_id: UUID,
    store: DataStore = Depends(get_store),
):
    return await StageProgressService(store).start_stage(applicant_id, stage_id)


@router.post("/stages/{stage_id}/complete", response_model=StageProgressRead)
async def complete_applicant_stage(
    applicant_id: UUID,
    stage_id: UUID,
    data: Optional[StageCompletion] = None,
    store: DataStore = Depends(get_store),
):
    data = data or StageCompletion()
    return await StageProgressService(store).complete_stage(
        applicant_id, stage_id, score=data.score, notes=data.notes
    )


@router.post("/stages/{stage_id}/skip", response_model=StageProgressRead)
async def skip_applicant_stage(
    applicant_id: UUID,
    stage_id: UUID,
    data: Optional[StageNotes] = None,
    store: DataStore = Depends(get_store),
):
    notes = data.notes if data else None
    return await StageProgressService(store).skip_stage(applicant_id, stage_id, notes=notes)


@router.post("/stages/{stage_id}/fail", response_model=StageProgressRead)
async def fail_applicant_stage(
    applicant_id: UUID,
    stage_id: UUID,
    data: Optional[StageNotes] = None,
    store: DataStore = Depends(get_store),
):
    notes = data.notes if data else None
    return await StageProgressService(store).fail_stage(applicant_id, stage_id, notes=notes)


@router.post("/stages/{stage_id}/advance", response_model=Optional[StageProgressRead])
async def advance_applicant_stage(
    applicant_id: UUID,
    stage_id: UUID,
    store: DataStore = Depends(get_store),
):
    """
    Complete the stage and start the next active one.
    
    Returns null when the stage was the last in the catalog.
    """
    return await StageProgressService(store).advance_to_next_stage(applicant_id, stage_id)


@router.get("/transitions/check", response_model=TransitionCheck)
async def check_applicant_transition(
    applicant_id: UUID,
    from_stage_id: UUID = Query(...),
    to_stage_id: UUID = Query(...),
    store: DataStore = Depends(get_store),
):
    evaluator = TransitionRuleEvaluator(store)
    return await evaluator.check_transition_conditions(applicant_id, from_stage_id, to_stage_id)
