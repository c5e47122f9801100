"""
Task instance business logic.

Instances are keyed by (applicant_id, task_id). Nothing is stored for a task
until its first mutation; that mutation inserts the row starting from the
task type's initial status.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from selection_pipeline.db.store import TASK_INSTANCES, DataStore
from selection_pipeline.errors import DependencyError
from selection_pipeline.schemas.task_definition import TaskDefinitionRead
from selection_pipeline.schemas.task_instance import TaskEmailRequest, TaskInstanceRead, TaskInstanceUpdate
from selection_pipeline.services import catalog
from selection_pipeline.services.notifications import NotificationSender, get_notification_sender
from selection_pipeline.services.task_definition_service import TaskDefinitionService
from selection_pipeline.utils.time import utc_now

logger = logging.getLogger(__name__)

NOT_STARTED = "not_started"
IN_PROGRESS = "in_progress"
DONE = "done"
AWAITING_REPLY = "awaiting_reply"
AWAITING_SUBMISSION = "awaiting_submission"
SUBMITTED = "submitted"

# Status an untouched task starts in, by task type
INITIAL_STATUS_BY_TASK_TYPE = {
    "scheduling_contact": AWAITING_REPLY,
    "reminder": AWAITING_REPLY,
    "document_submission": AWAITING_SUBMISSION,
}


def initial_status_for(task_type: str) -> str:
    return INITIAL_STATUS_BY_TASK_TYPE.get(task_type, NOT_STARTED)


def index_instances(rows: Iterable[dict]) -> Dict[UUID, dict]:
    """
    Map task_id to its instance row.

    Should a task have more than one row, the most recently updated one wins
    and the duplicate is logged.
    """
    by_task: Dict[UUID, dict] = {}
    for row in rows:
        current = by_task.get(row["task_id"])
        if current is not None:
            logger.warning(
                "Duplicate task instances for applicant %s task %s: %s, %s",
                row["applicant_id"], row["task_id"], current["id"], row["id"],
            )
            if current["updated_at"] >= row["updated_at"]:
                continue
        by_task[row["task_id"]] = row
    return by_task


class TaskInstanceService:
    """Service for an applicant's task instances."""

    def __init__(self, store: DataStore, notifier: Optional[NotificationSender] = None):
        self.store = store
        self.tasks = TaskDefinitionService(store)
        self.notifier = notifier

    async def list_for_applicant(self, applicant_id: UUID) -> List[TaskInstanceRead]:
        rows = await self.store.query(
            TASK_INSTANCES,
            filters={"applicant_id": applicant_id},
            order_by=["updated_at"],
        )
        return [TaskInstanceRead.model_validate(row) for row in index_instances(rows).values()]

    async def _find(self, applicant_id: UUID, task_id: UUID) -> Optional[dict]:
        rows = await self.store.query(
            TASK_INSTANCES,
            filters={"applicant_id": applicant_id, "task_id": task_id},
            order_by=["updated_at"],
        )
        return index_instances(rows).get(task_id)

    async def _apply(self, applicant_id: UUID, task_id: UUID, changes: dict) -> TaskInstanceRead:
        definition: TaskDefinitionRead = await self.tasks.get_by_id(task_id)

        errors: List[str] = []
        if "status" in changes:
            catalog.check_text(errors, changes["status"], "status", 50, required=True)
        catalog.raise_if_invalid(errors)

        existing = await self._find(applicant_id, task_id)
        previous_status = existing["status"] if existing else initial_status_for(definition.task_type)

        if "status" in changes:
            if changes["status"] == DONE and previous_status != DONE:
                changes["completed_at"] = utc_now()
            elif changes["status"] != DONE:
                changes["completed_at"] = None

        if existing is not None:
            row = await self.store.update(TASK_INSTANCES, existing["id"], changes)
        else:
            row = await self.store.insert(
                TASK_INSTANCES,
                {
                    "applicant_id": applicant_id,
                    "task_id": task_id,
                    "status": previous_status,
                    "due_date": None,
                    "completed_at": None,
                    "notes": "",
                    **changes,
                },
            )
            logger.info("Stored task instance %s for applicant %s task %s", row["id"], applicant_id, task_id)

        if "status" in changes and changes["status"] != previous_status:
            logger.info(
                "Task %s for applicant %s: %s -> %s",
                task_id, applicant_id, previous_status, changes["status"],
            )
        return TaskInstanceRead.model_validate(row)

    async def update_status(self, applicant_id: UUID, task_id: UUID, status: str) -> TaskInstanceRead:
        return await self._apply(applicant_id, task_id, {"status": status})

    async def update_notes(self, applicant_id: UUID, task_id: UUID, notes: str) -> TaskInstanceRead:
        return await self._apply(applicant_id, task_id, {"notes": notes})

    async def set_due_date(self, applicant_id: UUID, task_id: UUID, due_date: Optional[date]) -> TaskInstanceRead:
        return await self._apply(applicant_id, task_id, {"due_date": due_date})

    async def update(self, applicant_id: UUID, task_id: UUID, data: TaskInstanceUpdate) -> TaskInstanceRead:
        """Apply every field set on the request in one write."""
        changes = data.model_dump(exclude_unset=True)
        if "notes" in changes and changes["notes"] is None:
            changes["notes"] = ""
        if "status" in changes and changes["status"] is None:
            del changes["status"]
        return await self._apply(applicant_id, task_id, changes)

    async def send_task_email(self, applicant_id: UUID, task_id: UUID, message: TaskEmailRequest) -> TaskInstanceRead:
        """
        Send the task's message and mark the task done.

        Nothing is written when the sender fails; that surfaces as
        DependencyError.
        """
        await self.tasks.get_by_id(task_id)
        notifier = self.notifier or get_notification_sender()

        try:
            result = await notifier.send(message.recipient, message.subject, message.body)
        except Exception as exc:
            logger.error("Notification sender failed for task %s", task_id, exc_info=True)
            raise DependencyError("Notification sender failed", exc) from exc
        if not result.success:
            logger.error("Notification sender rejected message for task %s: %s", task_id, result)
            raise DependencyError(
                "Notification sender rejected the message",
                details={
                    "channel": notifier.channel,
                    "success": result.success,
                    "message_id": result.message_id,
                },
            )

        existing = await self._find(applicant_id, task_id)
        notes = existing["notes"] if existing else ""
        sent_line = f"sent: {result.message_id}"
        notes = f"{notes}\n{sent_line}" if notes else sent_line
        return await self._apply(applicant_id, task_id, {"status": DONE, "notes": notes})
