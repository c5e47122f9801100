import uuid

import pytest

from selection_pipeline.db.store import STAGE_DEFINITIONS
from selection_pipeline.errors import DependencyError, NotFoundError, ValidationError
from selection_pipeline.schemas.common import SortOrderUpdate
from selection_pipeline.schemas.stage_definition import StageDefinitionCreate, StageDefinitionUpdate
from selection_pipeline.services.stage_definition_service import StageDefinitionService
from tests.factories import make_stage, make_task

pytestmark = [pytest.mark.asyncio, pytest.mark.unit]


async def test_create_then_get_round_trip(store):
    service = StageDefinitionService(store)
    created = await service.create(
        StageDefinitionCreate(
            name="document_screening",
            display_name="Document screening",
            stage_group="selection",
            sort_order=3,
            session_types=["online", "in_person", "online"],
            extensions={"max_applicants": 40, "remote_ok": True},
        )
    )

    fetched = await service.get_by_id(created.id)

    assert fetched == created
    assert fetched.name == "document_screening"
    assert fetched.stage_group == "selection"
    assert fetched.session_types == ["online", "in_person"]
    assert fetched.extensions == {"max_applicants": 40, "remote_ok": True}
    assert fetched.config_version == 1


async def test_create_fills_defaults(store):
    stage = await make_stage(store, "document_screening")

    assert stage.color_scheme == "blue"
    assert stage.estimated_duration_minutes == 60
    assert stage.status_template == "basic"
    assert stage.is_active is True


async def test_status_template_resolution(store):
    session = await make_stage(store, "company_info_session")
    japanese = await make_stage(store, "人事面接")
    explicit = await make_stage(store, "職場見学", status_template="final")

    assert session.status_template == "event"
    assert japanese.status_template == "interview"
    assert explicit.status_template == "final"


async def test_create_collects_every_violation(store):
    service = StageDefinitionService(store)

    with pytest.raises(ValidationError) as excinfo:
        await service.create(
            StageDefinitionCreate(
                name="",
                display_name="x" * 101,
                description="d" * 501,
                estimated_duration_minutes=0,
                sort_order=-1,
            )
        )

    messages = excinfo.value.messages
    assert "name is required" in messages
    assert "display_name must be at most 100 characters" in messages
    assert "description must be at most 500 characters" in messages
    assert "estimated_duration_minutes must be between 1 and 1440" in messages
    assert "sort_order must be at least 0" in messages
    assert store.rows(STAGE_DEFINITIONS) == []


async def test_duplicate_active_name_rejected(store):
    await make_stage(store, "hr_interview")

    with pytest.raises(ValidationError) as excinfo:
        await make_stage(store, "hr_interview", sort_order=1)

    assert excinfo.value.messages == ["stage name 'hr_interview' already exists"]


async def test_retired_name_can_be_reused(store):
    service = StageDefinitionService(store)
    old = await make_stage(store, "hr_interview")
    await service.delete(old.id)

    replacement = await make_stage(store, "hr_interview")

    assert replacement.id != old.id


async def test_get_unknown_stage(store):
    service = StageDefinitionService(store)
    missing = uuid.uuid4()

    assert await service.find_by_id(missing) is None
    with pytest.raises(NotFoundError):
        await service.get_by_id(missing)


async def test_list_order_and_active_filter(store):
    service = StageDefinitionService(store)
    later = await make_stage(store, "final_selection", sort_order=5)
    first = await make_stage(store, "entry_form", sort_order=1)
    tie = await make_stage(store, "hr_interview", sort_order=5)
    await service.delete(first.id)

    assert [stage.id for stage in await service.list_all()] == [first.id, later.id, tie.id]
    assert [stage.id for stage in await service.list_active()] == [later.id, tie.id]


async def test_group_and_session_lookups(store):
    service = StageDefinitionService(store)
    interview = await make_stage(store, "hr_interview", sort_order=3, stage_group="selection", requires_session=True)
    await make_stage(store, "entry_form", sort_order=1, stage_group="entry")
    screening = await make_stage(store, "document_screening", sort_order=2, stage_group="selection")
    seminar = await make_stage(store, "seminar", sort_order=0, stage_group="internship", requires_session=True)
    await service.delete(seminar.id)

    assert [s.id for s in await service.list_by_group("selection")] == [screening.id, interview.id]
    assert await service.list_by_group("internship") == []
    assert [s.id for s in await service.list_requiring_session()] == [interview.id]
    assert await service.list_stage_groups() == ["entry", "selection"]


async def test_find_by_name_ignores_retired_stages(store):
    service = StageDefinitionService(store)
    retired = await make_stage(store, "document_screening")
    await service.delete(retired.id)

    assert await service.find_by_name("document_screening") is None

    current = await make_stage(store, "document_screening", sort_order=1)
    assert (await service.find_by_name("document_screening")).id == current.id
    assert await service.find_by_name("missing_stage") is None


async def test_update_bumps_config_version(store):
    service = StageDefinitionService(store)
    stage = await make_stage(store, "hr_interview")

    updated = await service.update(stage.id, StageDefinitionUpdate(display_name="HR interview", icon="users"))

    assert updated.display_name == "HR interview"
    assert updated.icon == "users"
    assert updated.name == "hr_interview"
    assert updated.config_version == 2


async def test_update_validates_only_given_fields(store):
    service = StageDefinitionService(store)
    stage = await make_stage(store, "hr_interview")

    with pytest.raises(ValidationError) as excinfo:
        await service.update(stage.id, StageDefinitionUpdate(estimated_duration_minutes=1441))

    assert excinfo.value.messages == ["estimated_duration_minutes must be between 1 and 1440"]


async def test_delete_is_soft(store):
    service = StageDefinitionService(store)
    stage = await make_stage(store, "hr_interview")

    deleted = await service.delete(stage.id)

    assert deleted.is_active is False
    assert deleted.config_version == 2
    assert (await service.get_by_id(stage.id)).is_active is False


async def test_reorder_applies_all_pairs(store):
    service = StageDefinitionService(store)
    a = await make_stage(store, "a_stage", sort_order=1)
    b = await make_stage(store, "b_stage", sort_order=2)

    await service.reorder([SortOrderUpdate(id=a.id, sort_order=2), SortOrderUpdate(id=b.id, sort_order=1)])

    assert [stage.id for stage in await service.list_all()] == [b.id, a.id]


async def test_reorder_unknown_id_writes_nothing(store):
    service = StageDefinitionService(store)
    a = await make_stage(store, "a_stage", sort_order=1)
    missing = uuid.uuid4()

    with pytest.raises(NotFoundError) as excinfo:
        await service.reorder([SortOrderUpdate(id=a.id, sort_order=9), SortOrderUpdate(id=missing, sort_order=1)])

    assert excinfo.value.entity_id == missing
    assert (await service.get_by_id(a.id)).sort_order == 1


async def test_reorder_rejects_repeated_id(store):
    service = StageDefinitionService(store)
    a = await make_stage(store, "a_stage", sort_order=1)
    b = await make_stage(store, "b_stage", sort_order=2)
    writes_before = store.write_count

    with pytest.raises(ValidationError) as excinfo:
        await service.reorder([
            SortOrderUpdate(id=a.id, sort_order=5),
            SortOrderUpdate(id=b.id, sort_order=3),
            SortOrderUpdate(id=a.id, sort_order=4),
        ])

    assert excinfo.value.messages == [f"duplicate id in reorder batch: {a.id}"]
    assert store.write_count == writes_before
    unchanged = await service.get_by_id(a.id)
    assert (unchanged.sort_order, unchanged.config_version) == (1, 1)
    assert (await service.get_by_id(b.id)).sort_order == 2


async def test_reorder_rolls_back_on_store_failure(store):
    service = StageDefinitionService(store)
    a = await make_stage(store, "a_stage", sort_order=1)
    b = await make_stage(store, "b_stage", sort_order=2)
    store.failing_ids.add(b.id)

    with pytest.raises(DependencyError):
        await service.reorder([SortOrderUpdate(id=a.id, sort_order=2), SortOrderUpdate(id=b.id, sort_order=1)])

    assert (await service.get_by_id(a.id)).sort_order == 1
    assert (await service.get_by_id(b.id)).sort_order == 2


async def test_config_summary_counts(store):
    service = StageDefinitionService(store)
    stage = await make_stage(store, "document_screening")
    retired = await make_stage(store, "old_stage", sort_order=1)
    await service.delete(retired.id)
    await make_task(store, stage.id, "send_documents")

    summary = await service.config_summary()

    assert summary.total_stages == 2
    assert summary.active_stages == 1
    assert summary.total_tasks == 1
    assert summary.total_statuses == 0


async def test_validate_integrity(store):
    service = StageDefinitionService(store)

    empty = await service.validate_integrity()
    assert empty.is_valid is True
    assert empty.warnings == ["no active stages"]

    await make_stage(store, "a_stage", sort_order=1)
    await make_stage(store, "b_stage", sort_order=1)
    report = await service.validate_integrity()

    assert report.is_valid is True
    assert report.warnings == ["duplicate sort order: 1"]
