"""
Transition rule router.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from selection_pipeline.core.dependencies import get_store
from selection_pipeline.db.store import DataStore
from selection_pipeline.schemas.transition_rule import TransitionRuleCreate, TransitionRuleRead
from selection_pipeline.services.transition_rule_service import TransitionRuleService

router = APIRouter(prefix="/transition-rules", tags=["transition-rules"])


@router.get("", response_model=List[TransitionRuleRead])
async def list_transition_rules(store: DataStore = Depends(get_store)):
    return await TransitionRuleService(store).list_rules()


@router.post("", response_model=TransitionRuleRead, status_code=status.HTTP_201_CREATED)
async def create_transition_rule(
    data: TransitionRuleCreate,
    store: DataStore = Depends(get_store),
):
    """Create a rule; a second rule for the same stage pair is a conflict."""
    return await TransitionRuleService(store).create_rule(data)


@router.get("/duplicates", response_model=List[TransitionRuleRead])
async def list_duplicate_transition_rules(store: DataStore = Depends(get_store)):
    return await TransitionRuleService(store).find_duplicate_rules()


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transition_rule(
    rule_id: UUID,
    store: DataStore = Depends(get_store),
):
    await TransitionRuleService(store).delete_rule(rule_id)
