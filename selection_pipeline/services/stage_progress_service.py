"""
Stage progress business logic.

Each attempt at a stage is one StageProgress row moving through

    pending -> in_progress -> completed | skipped
               in_progress -> failed

Terminal rows accept no further transition; trying a stage again starts a
fresh row. The applicant's current row is tracked by an explicit pointer
that is written in the same transaction as the row it points to.
"""

import logging
from collections import Counter
from typing import List, Optional
from uuid import UUID

from selection_pipeline.db.store import APPLICANT_STAGE_POINTERS, STAGE_PROGRESS, DataStore
from selection_pipeline.errors import InvalidStateTransition, NotFoundError
from selection_pipeline.schemas.stage_definition import StageDefinitionRead
from selection_pipeline.schemas.stage_progress import StageProgressRead
from selection_pipeline.services.stage_definition_service import StageDefinitionService
from selection_pipeline.utils.time import utc_now

logger = logging.getLogger(__name__)

PENDING = "pending"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
FAILED = "failed"
SKIPPED = "skipped"

ACTIVE_STATUSES = {PENDING, IN_PROGRESS}
TERMINAL_STATUSES = {COMPLETED, FAILED, SKIPPED}


def history_key(row: dict):
    # Rows not yet started sort by creation time
    return (row["started_at"] or row["created_at"], row["created_at"])


def catalog_key(stage: StageDefinitionRead):
    return (stage.sort_order, stage.created_at)


class StageProgressService:
    """Service for applicants' movement through the stage catalog."""

    def __init__(self, store: DataStore):
        self.store = store
        self.stages = StageDefinitionService(store)

    async def _rows_for_stage(self, applicant_id: UUID, stage_id: UUID) -> List[dict]:
        rows = await self.store.query(
            STAGE_PROGRESS,
            filters={"applicant_id": applicant_id, "stage_id": stage_id},
        )
        return sorted(rows, key=history_key)

    async def _pointer(self, applicant_id: UUID) -> Optional[dict]:
        rows = await self.store.query(APPLICANT_STAGE_POINTERS, filters={"applicant_id": applicant_id})
        return rows[0] if rows else None

    async def _move_pointer(self, applicant_id: UUID, progress_id: UUID) -> None:
        pointer = await self._pointer(applicant_id)
        if pointer is None:
            await self.store.insert(
                APPLICANT_STAGE_POINTERS,
                {"applicant_id": applicant_id, "current_progress_id": progress_id},
            )
        else:
            await self.store.update(
                APPLICANT_STAGE_POINTERS,
                pointer["id"],
                {"current_progress_id": progress_id},
            )

    async def list_progress(self, applicant_id: UUID) -> List[StageProgressRead]:
        """Full history for an applicant, ordered by started_at then created_at."""
        rows = await self.store.query(STAGE_PROGRESS, filters={"applicant_id": applicant_id})
        return [StageProgressRead.model_validate(row) for row in sorted(rows, key=history_key)]

    async def get_stage_progress(self, applicant_id: UUID, stage_id: UUID) -> Optional[StageProgressRead]:
        """Latest row for the stage, or None."""
        rows = await self._rows_for_stage(applicant_id, stage_id)
        return StageProgressRead.model_validate(rows[-1]) if rows else None

    async def get_current_progress(self, applicant_id: UUID) -> Optional[StageProgressRead]:
        """The pointed-to row while it is still active, otherwise None."""
        pointer = await self._pointer(applicant_id)
        if pointer is None:
            return None
        row = await self.store.get_one(STAGE_PROGRESS, pointer["current_progress_id"])
        if row is None or row["status"] not in ACTIVE_STATUSES:
            return None
        return StageProgressRead.model_validate(row)

    async def start_stage(self, applicant_id: UUID, stage_id: UUID) -> StageProgressRead:
        """
        Open a new in_progress row for the stage and point the applicant at it.

        An existing active row for the same stage is not rejected; the pointer
        moves to the newer row and the duplicate is logged.
        """
        await self.stages.get_by_id(stage_id)

        active = [row for row in await self._rows_for_stage(applicant_id, stage_id) if row["status"] in ACTIVE_STATUSES]
        if active:
            logger.warning(
                "Applicant %s already has %d active row(s) for stage %s; starting another",
                applicant_id, len(active), stage_id,
            )

        async with self.store.transaction():
            row = await self.store.insert(
                STAGE_PROGRESS,
                {
                    "applicant_id": applicant_id,
                    "stage_id": stage_id,
                    "status": IN_PROGRESS,
                    "started_at": utc_now(),
                    "completed_at": None,
                    "score": None,
                    "notes": None,
                },
            )
            await self._move_pointer(applicant_id, row["id"])

        logger.info("Applicant %s started stage %s (progress %s)", applicant_id, stage_id, row["id"])
        return StageProgressRead.model_validate(row)

    async def _target_row(self, applicant_id: UUID, stage_id: UUID) -> dict:
        rows = await self._rows_for_stage(applicant_id, stage_id)
        if not rows:
            raise NotFoundError(
                STAGE_PROGRESS,
                stage_id,
                message=f"applicant {applicant_id} has no progress for stage {stage_id}",
            )

        pointer = await self._pointer(applicant_id)
        if pointer is not None:
            for row in rows:
                if row["id"] == pointer["current_progress_id"] and row["status"] in ACTIVE_STATUSES:
                    return row

        active = [row for row in rows if row["status"] in ACTIVE_STATUSES]
        if not active:
            latest = rows[-1]
            raise InvalidStateTransition(
                f"stage {stage_id} is already {latest['status']} for applicant {applicant_id}",
                latest["status"],
            )
        return active[-1]

    async def _finish(
        self,
        applicant_id: UUID,
        stage_id: UUID,
        status: str,
        score: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> StageProgressRead:
        row = await self._target_row(applicant_id, stage_id)
        if status == FAILED and row["status"] == PENDING:
            raise InvalidStateTransition(
                f"stage {stage_id} has not started for applicant {applicant_id}",
                row["status"],
            )

        changes = {"status": status, "completed_at": utc_now()}
        if score is not None:
            changes["score"] = score
        if notes is not None:
            changes["notes"] = notes

        updated = await self.store.update(STAGE_PROGRESS, row["id"], changes)
        logger.info("Applicant %s stage %s: %s -> %s", applicant_id, stage_id, row["status"], status)
        return StageProgressRead.model_validate(updated)

    async def complete_stage(
        self,
        applicant_id: UUID,
        stage_id: UUID,
        score: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> StageProgressRead:
        return await self._finish(applicant_id, stage_id, COMPLETED, score=score, notes=notes)

    async def skip_stage(self, applicant_id: UUID, stage_id: UUID, notes: Optional[str] = None) -> StageProgressRead:
        return await self._finish(applicant_id, stage_id, SKIPPED, notes=notes)

    async def fail_stage(self, applicant_id: UUID, stage_id: UUID, notes: Optional[str] = None) -> StageProgressRead:
        return await self._finish(applicant_id, stage_id, FAILED, notes=notes)

    async def next_stage(self, stage_id: UUID) -> Optional[StageDefinitionRead]:
        """First active stage after the given one in catalog order, or None."""
        current = await self.stages.get_by_id(stage_id)
        for stage in await self.stages.list_active():
            if stage.id != current.id and catalog_key(stage) > catalog_key(current):
                return stage
        return None

    async def advance_to_next_stage(self, applicant_id: UUID, current_stage_id: UUID) -> Optional[StageProgressRead]:
        """
        Complete the current stage and start the next active one.

        Returns the new progress row, or None when the current stage is the
        last one in the catalog. Transition rules are not consulted.
        """
        async with self.store.transaction():
            await self.complete_stage(applicant_id, current_stage_id)
            upcoming = await self.next_stage(current_stage_id)
            if upcoming is None:
                logger.info("Applicant %s completed the last stage %s", applicant_id, current_stage_id)
                return None
            return await self.start_stage(applicant_id, upcoming.id)

    async def find_duplicate_active_progress(self, applicant_id: UUID) -> List[UUID]:
        """Stage ids where the applicant has more than one active row."""
        rows = await self.store.query(STAGE_PROGRESS, filters={"applicant_id": applicant_id})
        counts = Counter(row["stage_id"] for row in rows if row["status"] in ACTIVE_STATUSES)
        return [stage_id for stage_id, count in counts.items() if count > 1]
