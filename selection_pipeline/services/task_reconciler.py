"""
Per-applicant task view.

Merges a stage's active task definitions with the applicant's stored task
instances. Tasks the applicant has not touched yet are synthesized on the fly
and never written here.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional
from uuid import UUID

from selection_pipeline.db.store import STAGE_PROGRESS, TASK_INSTANCES, DataStore
from selection_pipeline.schemas.task_definition import TaskDefinitionRead
from selection_pipeline.schemas.task_instance import ApplicantTask
from selection_pipeline.services.stage_progress_service import history_key
from selection_pipeline.services.task_definition_service import TaskDefinitionService
from selection_pipeline.services.task_instance_service import index_instances, initial_status_for

logger = logging.getLogger(__name__)


def _definition_fields(definition: TaskDefinitionRead) -> dict:
    return {
        "task_id": definition.id,
        "stage_id": definition.stage_id,
        "name": definition.name,
        "display_name": definition.display_name,
        "description": definition.description,
        "task_type": definition.task_type,
        "sort_order": definition.sort_order,
        "is_required": definition.is_required,
        "due_offset_days": definition.due_offset_days,
        "email_template_id": definition.email_template_id,
    }


class TaskReconciler:
    """Builds the merged task list for one applicant at one stage."""

    def __init__(self, store: DataStore):
        self.store = store
        self.tasks = TaskDefinitionService(store)

    async def _stage_start_date(self, applicant_id: UUID, stage_id: UUID) -> Optional[date]:
        rows = await self.store.query(
            STAGE_PROGRESS,
            filters={"applicant_id": applicant_id, "stage_id": stage_id},
        )
        started = [row for row in rows if row["started_at"] is not None]
        if not started:
            return None
        return max(started, key=history_key)["started_at"].date()

    async def get_tasks_for_applicant_stage(self, applicant_id: UUID, stage_id: UUID) -> List[ApplicantTask]:
        """
        One entry per active task definition of the stage, ordered by sort_order.

        Stored instances are merged in; missing ones are synthesized with the
        task type's initial status and a due date offset from the stage start.
        """
        definitions = await self.tasks.list_for_stage(stage_id)
        rows = await self.store.query(
            TASK_INSTANCES,
            filters={"applicant_id": applicant_id},
            order_by=["updated_at"],
        )
        instances = index_instances(rows)
        start_date = await self._stage_start_date(applicant_id, stage_id)

        merged = []
        for definition in definitions:
            instance = instances.get(definition.id)
            if instance is not None:
                merged.append(
                    ApplicantTask(
                        **_definition_fields(definition),
                        applicant_id=applicant_id,
                        instance_id=instance["id"],
                        is_virtual=False,
                        status=instance["status"],
                        due_date=instance["due_date"],
                        completed_at=instance["completed_at"],
                        notes=instance["notes"] or "",
                    )
                )
                continue

            due_date = None
            if start_date is not None and definition.due_offset_days is not None:
                due_date = start_date + timedelta(days=definition.due_offset_days)
            merged.append(
                ApplicantTask(
                    **_definition_fields(definition),
                    applicant_id=applicant_id,
                    instance_id=None,
                    is_virtual=True,
                    status=initial_status_for(definition.task_type),
                    due_date=due_date,
                )
            )

        merged.sort(key=lambda task: task.sort_order)
        logger.debug(
            "Reconciled %d tasks for applicant %s stage %s (%d virtual)",
            len(merged), applicant_id, stage_id, sum(1 for task in merged if task.is_virtual),
        )
        return merged
