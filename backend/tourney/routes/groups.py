from fastapi import APIRouter

from tourney.config import config
from tourney.logic.scheduling.builder import (
    create_group,
    get_group_with_matches,
    reconcile_group_participants,
)
from tourney.models.db.group import GroupCreateBody, GroupParticipantsBody
from tourney.routes.models import GroupReconciliationResponse, GroupResponse
from tourney.utils.id_types import GroupId, StageId

router = APIRouter(prefix=config.api_prefix)


@router.post("/stages/{stage_id}/groups", response_model=GroupResponse)
async def create_group_in_stage(stage_id: StageId, body: GroupCreateBody) -> GroupResponse:
    return GroupResponse(data=await create_group(stage_id, body))


@router.get("/groups/{group_id}", response_model=GroupResponse)
async def get_group(group_id: GroupId) -> GroupResponse:
    return GroupResponse(data=await get_group_with_matches(group_id))


@router.put("/groups/{group_id}/participants", response_model=GroupReconciliationResponse)
async def update_group_participants(
    group_id: GroupId, body: GroupParticipantsBody
) -> GroupReconciliationResponse:
    return GroupReconciliationResponse(
        data=await reconcile_group_participants(group_id, body.participant_ids)
    )
