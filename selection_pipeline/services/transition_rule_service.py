"""
Stage transition rules.

A rule gates movement from one stage to another:

- automatic: allowed once the prior stage is completed
- manual: never allowed automatically
- conditional: allowed unless the prior stage's score is below min_score

Rules are configuration, not history, so deleting one removes it.
"""

import logging
from collections import Counter
from typing import Any, List, Optional
from uuid import UUID

from selection_pipeline.db.store import STAGE_TRANSITION_RULES, DataStore
from selection_pipeline.errors import ConflictError, NotFoundError, RuleEvaluationError
from selection_pipeline.schemas.transition_rule import TransitionCheck, TransitionRuleCreate, TransitionRuleRead
from selection_pipeline.services import catalog
from selection_pipeline.services.stage_definition_service import StageDefinitionService
from selection_pipeline.services.stage_progress_service import COMPLETED, StageProgressService

logger = logging.getLogger(__name__)

AUTOMATIC = "automatic"
MANUAL = "manual"
CONDITIONAL = "conditional"
CONDITION_TYPES = (AUTOMATIC, MANUAL, CONDITIONAL)

PRIOR_STAGE_INCOMPLETE = "prior stage incomplete"
NO_RULE_DEFINED = "no rule defined"
MANUAL_APPROVAL_REQUIRED = "manual approval required"
UNKNOWN_CONDITION_TYPE = "unknown condition type"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def read_min_score(config: dict) -> Any:
    """min_score from a rule's config; the older minScore key is still honoured."""
    if "min_score" in config:
        return config["min_score"]
    return config.get("minScore")


def evaluate_rule(rule: TransitionRuleRead, score: Optional[float]) -> TransitionCheck:
    if rule.condition_type == AUTOMATIC:
        return TransitionCheck(can_transition=True)
    if rule.condition_type == MANUAL:
        return TransitionCheck(can_transition=False, reason=MANUAL_APPROVAL_REQUIRED)
    if rule.condition_type == CONDITIONAL:
        min_score = read_min_score(rule.condition_config)
        if min_score is None:
            return TransitionCheck(can_transition=True)
        if not _is_number(min_score):
            raise RuleEvaluationError(f"min_score must be a number, got {min_score!r}", rule_id=rule.id)
        if score is not None and score < min_score:
            return TransitionCheck(
                can_transition=False,
                reason=f"minimum score {min_score:g} required (current: {score:g})",
            )
        return TransitionCheck(can_transition=True)

    logger.warning("Rule %s has unknown condition type %r", rule.id, rule.condition_type)
    return TransitionCheck(can_transition=False, reason=UNKNOWN_CONDITION_TYPE)


class TransitionRuleEvaluator:
    """Decides whether an applicant may move from one stage to another."""

    def __init__(self, store: DataStore):
        self.store = store
        self.progress = StageProgressService(store)

    async def check_transition_conditions(
        self,
        applicant_id: UUID,
        from_stage_id: UUID,
        to_stage_id: UUID,
    ) -> TransitionCheck:
        progress = await self.progress.get_stage_progress(applicant_id, from_stage_id)
        if progress is None or progress.status != COMPLETED:
            return TransitionCheck(can_transition=False, reason=PRIOR_STAGE_INCOMPLETE)

        rows = await self.store.query(
            STAGE_TRANSITION_RULES,
            filters={"from_stage_id": from_stage_id, "to_stage_id": to_stage_id},
        )
        if not rows:
            return TransitionCheck(can_transition=False, reason=NO_RULE_DEFINED)
        if len(rows) > 1:
            logger.error(
                "Found %d transition rules from %s to %s",
                len(rows), from_stage_id, to_stage_id,
            )
            raise RuleEvaluationError(
                f"{len(rows)} transition rules defined from {from_stage_id} to {to_stage_id}"
            )

        check = evaluate_rule(TransitionRuleRead.model_validate(rows[0]), progress.score)
        logger.debug(
            "Transition %s -> %s for applicant %s: %s",
            from_stage_id, to_stage_id, applicant_id, check.reason or "allowed",
        )
        return check


class TransitionRuleService:
    """Service for stored transition rules."""

    def __init__(self, store: DataStore):
        self.store = store
        self.stages = StageDefinitionService(store)

    async def list_rules(self) -> List[TransitionRuleRead]:
        rows = await self.store.query(STAGE_TRANSITION_RULES, order_by=["created_at"])
        return [TransitionRuleRead.model_validate(row) for row in rows]

    async def create_rule(self, data: TransitionRuleCreate) -> TransitionRuleRead:
        errors: List[str] = []
        config = dict(data.condition_config)
        if data.condition_type not in CONDITION_TYPES:
            errors.append(f"unknown condition type: {data.condition_type}")
        if data.from_stage_id == data.to_stage_id:
            errors.append("a rule cannot lead from a stage to itself")
        if data.condition_type == CONDITIONAL:
            min_score = read_min_score(config)
            if min_score is not None and not _is_number(min_score):
                errors.append("min_score must be a number")
            config.pop("minScore", None)
            if min_score is not None:
                config["min_score"] = min_score
        catalog.raise_if_invalid(errors)

        await self.stages.get_by_id(data.from_stage_id)
        await self.stages.get_by_id(data.to_stage_id)

        existing = await self.store.query(
            STAGE_TRANSITION_RULES,
            filters={"from_stage_id": data.from_stage_id, "to_stage_id": data.to_stage_id},
        )
        if existing:
            raise ConflictError(
                f"a transition rule from {data.from_stage_id} to {data.to_stage_id} already exists",
                {"rule_id": str(existing[0]["id"])},
            )

        row = await self.store.insert(
            STAGE_TRANSITION_RULES,
            {
                "from_stage_id": data.from_stage_id,
                "to_stage_id": data.to_stage_id,
                "condition_type": data.condition_type,
                "condition_config": config,
            },
        )
        logger.info(
            "Created %s transition rule %s: %s -> %s",
            data.condition_type, row["id"], data.from_stage_id, data.to_stage_id,
        )
        return TransitionRuleRead.model_validate(row)

    async def delete_rule(self, rule_id: UUID) -> None:
        if await self.store.get_one(STAGE_TRANSITION_RULES, rule_id) is None:
            raise NotFoundError(STAGE_TRANSITION_RULES, rule_id)
        await self.store.delete(STAGE_TRANSITION_RULES, rule_id)
        logger.info("Deleted transition rule %s", rule_id)

    async def find_duplicate_rules(self) -> List[TransitionRuleRead]:
        """Rules sharing a (from, to) pair with another rule."""
        rules = await self.list_rules()
        counts = Counter((rule.from_stage_id, rule.to_stage_id) for rule in rules)
        return [rule for rule in rules if counts[(rule.from_stage_id, rule.to_stage_id)] > 1]
