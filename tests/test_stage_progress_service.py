import uuid

import pytest

from selection_pipeline.db.store import APPLICANT_STAGE_POINTERS, STAGE_PROGRESS
from selection_pipeline.errors import InvalidStateTransition, NotFoundError
from selection_pipeline.services.stage_definition_service import StageDefinitionService
from selection_pipeline.services.stage_progress_service import StageProgressService
from tests.factories import make_stage

pytestmark = [pytest.mark.asyncio, pytest.mark.unit]


async def _linear_catalog(store):
    return [
        await make_stage(store, "entry_form", sort_order=1),
        await make_stage(store, "document_screening", sort_order=2),
        await make_stage(store, "hr_interview", sort_order=3),
    ]


async def test_start_stage_moves_pointer(store):
    applicant_id = uuid.uuid4()
    stage_a, stage_b, _ = await _linear_catalog(store)
    service = StageProgressService(store)

    first = await service.start_stage(applicant_id, stage_a.id)
    assert first.status == "in_progress"
    assert first.started_at is not None
    assert (await service.get_current_progress(applicant_id)).id == first.id

    second = await service.start_stage(applicant_id, stage_b.id)
    assert (await service.get_current_progress(applicant_id)).id == second.id
    assert len(store.rows(APPLICANT_STAGE_POINTERS)) == 1


async def test_start_unknown_stage(store):
    with pytest.raises(NotFoundError):
        await StageProgressService(store).start_stage(uuid.uuid4(), uuid.uuid4())
    assert store.rows(STAGE_PROGRESS) == []


async def test_complete_without_start(store):
    stage_a, _, _ = await _linear_catalog(store)

    with pytest.raises(NotFoundError):
        await StageProgressService(store).complete_stage(uuid.uuid4(), stage_a.id)


async def test_complete_records_score_and_notes(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_a.id)

    completed = await service.complete_stage(applicant_id, stage_a.id, score=82.5, notes="strong essay")

    assert completed.status == "completed"
    assert completed.completed_at is not None
    assert (completed.score, completed.notes) == (82.5, "strong essay")
    assert await service.get_current_progress(applicant_id) is None


async def test_terminal_rows_reject_transitions(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_a.id)
    await service.skip_stage(applicant_id, stage_a.id, notes="waived")

    with pytest.raises(InvalidStateTransition) as excinfo:
        await service.complete_stage(applicant_id, stage_a.id)
    assert excinfo.value.current_status == "skipped"

    with pytest.raises(InvalidStateTransition):
        await service.fail_stage(applicant_id, stage_a.id)


async def test_fail_requires_started_row(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    await store.insert(STAGE_PROGRESS, {
        "applicant_id": applicant_id,
        "stage_id": stage_a.id,
        "status": "pending",
        "started_at": None,
        "completed_at": None,
        "score": None,
        "notes": None,
    })

    with pytest.raises(InvalidStateTransition) as excinfo:
        await service.fail_stage(applicant_id, stage_a.id)
    assert excinfo.value.current_status == "pending"


async def test_fail_in_progress(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_a.id)

    failed = await service.fail_stage(applicant_id, stage_a.id, notes="no show")

    assert failed.status == "failed"
    assert failed.notes == "no show"


async def test_retry_creates_fresh_row(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    first = await service.start_stage(applicant_id, stage_a.id)
    await service.fail_stage(applicant_id, stage_a.id)

    retry = await service.start_stage(applicant_id, stage_a.id)

    assert retry.id != first.id
    assert (await service.get_stage_progress(applicant_id, stage_a.id)).id == retry.id
    assert [p.status for p in await service.list_progress(applicant_id)] == ["failed", "in_progress"]


async def test_duplicate_start_is_reported(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_a.id)
    newer = await service.start_stage(applicant_id, stage_a.id)

    assert await service.find_duplicate_active_progress(applicant_id) == [stage_a.id]

    completed = await service.complete_stage(applicant_id, stage_a.id)
    assert completed.id == newer.id
    assert await service.find_duplicate_active_progress(applicant_id) == []


async def test_linear_advance(store):
    applicant_id = uuid.uuid4()
    stage_a, stage_b, _ = await _linear_catalog(store)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_a.id)

    started = await service.advance_to_next_stage(applicant_id, stage_a.id)

    assert started.stage_id == stage_b.id
    assert started.status == "in_progress"
    assert (await service.get_stage_progress(applicant_id, stage_a.id)).status == "completed"
    assert (await service.get_current_progress(applicant_id)).id == started.id


async def test_advance_skips_inactive_stages(store):
    applicant_id = uuid.uuid4()
    stage_a, stage_b, stage_c = await _linear_catalog(store)
    await StageDefinitionService(store).delete(stage_b.id)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_a.id)

    started = await service.advance_to_next_stage(applicant_id, stage_a.id)

    assert started.stage_id == stage_c.id


async def test_advance_at_end_of_catalog(store):
    applicant_id = uuid.uuid4()
    _, _, stage_c = await _linear_catalog(store)
    service = StageProgressService(store)
    await service.start_stage(applicant_id, stage_c.id)

    assert await service.advance_to_next_stage(applicant_id, stage_c.id) is None
    assert [p.status for p in await service.list_progress(applicant_id)] == ["completed"]


async def test_advance_without_start_writes_nothing(store):
    applicant_id = uuid.uuid4()
    stage_a, _, _ = await _linear_catalog(store)

    with pytest.raises(NotFoundError):
        await StageProgressService(store).advance_to_next_stage(applicant_id, stage_a.id)
    assert store.rows(STAGE_PROGRESS) == []
