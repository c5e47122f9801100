import uuid

import pytest

from selection_pipeline.db.store import STAGE_TRANSITION_RULES
from selection_pipeline.errors import ConflictError, NotFoundError, RuleEvaluationError, ValidationError
from selection_pipeline.schemas.transition_rule import TransitionRuleCreate
from selection_pipeline.services.stage_progress_service import StageProgressService
from selection_pipeline.services.transition_rule_service import TransitionRuleEvaluator, TransitionRuleService
from tests.factories import make_stage

pytestmark = [pytest.mark.asyncio, pytest.mark.unit]


async def _two_stages(store):
    return (
        await make_stage(store, "document_screening", sort_order=1),
        await make_stage(store, "hr_interview", sort_order=2),
    )


async def _complete(store, applicant_id, stage_id, score=None):
    progress = StageProgressService(store)
    await progress.start_stage(applicant_id, stage_id)
    await progress.complete_stage(applicant_id, stage_id, score=score)


async def _rule(store, source, target, condition_type, config=None):
    return await TransitionRuleService(store).create_rule(
        TransitionRuleCreate(
            from_stage_id=source.id,
            to_stage_id=target.id,
            condition_type=condition_type,
            condition_config=config or {},
        )
    )


async def test_prior_stage_incomplete(store):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await _rule(store, source, target, "automatic")
    evaluator = TransitionRuleEvaluator(store)

    check = await evaluator.check_transition_conditions(applicant_id, source.id, target.id)
    assert (check.can_transition, check.reason) == (False, "prior stage incomplete")

    await StageProgressService(store).start_stage(applicant_id, source.id)
    check = await evaluator.check_transition_conditions(applicant_id, source.id, target.id)
    assert (check.can_transition, check.reason) == (False, "prior stage incomplete")


async def test_no_rule_defined(store):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await _complete(store, applicant_id, source.id)

    check = await TransitionRuleEvaluator(store).check_transition_conditions(applicant_id, source.id, target.id)

    assert (check.can_transition, check.reason) == (False, "no rule defined")


async def test_automatic_and_manual(store):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await _complete(store, applicant_id, source.id)
    evaluator = TransitionRuleEvaluator(store)

    await _rule(store, source, target, "automatic")
    assert (await evaluator.check_transition_conditions(applicant_id, source.id, target.id)).can_transition is True

    await _rule(store, target, source, "manual")
    await _complete(store, applicant_id, target.id)
    check = await evaluator.check_transition_conditions(applicant_id, target.id, source.id)
    assert (check.can_transition, check.reason) == (False, "manual approval required")


@pytest.mark.parametrize(
    "score, allowed",
    [(65, False), (75, True), (70, True), (None, True)],
)
async def test_conditional_min_score(store, score, allowed):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await _rule(store, source, target, "conditional", {"min_score": 70})
    await _complete(store, applicant_id, source.id, score=score)

    check = await TransitionRuleEvaluator(store).check_transition_conditions(applicant_id, source.id, target.id)

    assert check.can_transition is allowed
    if not allowed:
        assert check.reason == "minimum score 70 required (current: 65)"


async def test_legacy_min_score_key(store):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await store.insert(STAGE_TRANSITION_RULES, {
        "from_stage_id": source.id,
        "to_stage_id": target.id,
        "condition_type": "conditional",
        "condition_config": {"minScore": 70},
    })
    await _complete(store, applicant_id, source.id, score=65)

    check = await TransitionRuleEvaluator(store).check_transition_conditions(applicant_id, source.id, target.id)

    assert check.can_transition is False
    assert check.reason.startswith("minimum score 70")


async def test_stored_rule_problems(store):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await _complete(store, applicant_id, source.id, score=50)
    evaluator = TransitionRuleEvaluator(store)
    bad = await store.insert(STAGE_TRANSITION_RULES, {
        "from_stage_id": source.id,
        "to_stage_id": target.id,
        "condition_type": "conditional",
        "condition_config": {"min_score": "seventy"},
    })

    with pytest.raises(RuleEvaluationError) as excinfo:
        await evaluator.check_transition_conditions(applicant_id, source.id, target.id)
    assert excinfo.value.rule_id == bad["id"]

    await store.update(STAGE_TRANSITION_RULES, bad["id"], {"condition_type": "score_band"})
    check = await evaluator.check_transition_conditions(applicant_id, source.id, target.id)
    assert (check.can_transition, check.reason) == (False, "unknown condition type")


async def test_duplicate_rules_are_surfaced(store):
    applicant_id = uuid.uuid4()
    source, target = await _two_stages(store)
    await _complete(store, applicant_id, source.id)
    for condition_type in ("automatic", "manual"):
        await store.insert(STAGE_TRANSITION_RULES, {
            "from_stage_id": source.id,
            "to_stage_id": target.id,
            "condition_type": condition_type,
            "condition_config": {},
        })

    with pytest.raises(RuleEvaluationError):
        await TransitionRuleEvaluator(store).check_transition_conditions(applicant_id, source.id, target.id)
    assert len(await TransitionRuleService(store).find_duplicate_rules()) == 2


async def test_create_rule_validation(store):
    source, target = await _two_stages(store)

    with pytest.raises(ValidationError) as excinfo:
        await _rule(store, source, source, "sometimes")
    assert excinfo.value.messages == [
        "unknown condition type: sometimes",
        "a rule cannot lead from a stage to itself",
    ]

    with pytest.raises(ValidationError):
        await _rule(store, source, target, "conditional", {"min_score": "high"})

    with pytest.raises(NotFoundError):
        await TransitionRuleService(store).create_rule(
            TransitionRuleCreate(from_stage_id=source.id, to_stage_id=uuid.uuid4(), condition_type="automatic")
        )


async def test_create_rule_normalizes_legacy_key(store):
    source, target = await _two_stages(store)

    rule = await _rule(store, source, target, "conditional", {"minScore": 60})

    assert rule.condition_config == {"min_score": 60}


async def test_create_list_delete_rules(store):
    source, target = await _two_stages(store)
    service = TransitionRuleService(store)
    rule = await _rule(store, source, target, "automatic")

    with pytest.raises(ConflictError):
        await _rule(store, source, target, "manual")

    assert [r.id for r in await service.list_rules()] == [rule.id]
    assert await service.find_duplicate_rules() == []

    await service.delete_rule(rule.id)
    assert await service.list_rules() == []
    with pytest.raises(NotFoundError):
        await service.delete_rule(rule.id)
