# app/api/endpoints/chair.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_current_user, get_phase_info
from app.core.eligibility import rankable_position_types
from app.models.user import User
from app.schemas.membership import ActionResponse
from app.schemas.phase import PhaseInfo, PhaseSummary
from app.schemas.ranking import ChairPositionsResponse, ChairRankRequest
from app.services.lead_auth_service import (
    check_cca_chair_authorization,
    get_user_authorized_cca_ids,
)
from app.services.ranking_service import (
    get_position,
    list_positions_for_chair,
    save_chair_rankings,
)

router = APIRouter(
    prefix="/api/chair/positions",
    tags=["Chair Ranking"]
)


# 1️⃣ Positions (with applicants) the chair may rank this round
@router.get("/forChair", response_model=ChairPositionsResponse)
async def get_positions_for_chair(
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
):
    cca_ids = await get_user_authorized_cca_ids(session, current_user.id)
    if not cca_ids:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Unauthorized: Not a lead/vice")

    if not phase_info.allow_chair_ranking:
        return ChairPositionsResponse(
            positions=[],
            error=f"Chair ranking is not active. Current phase: {phase_info.phase.value}",
            phaseInfo=PhaseSummary.from_info(phase_info),
        )

    positions = await list_positions_for_chair(session, cca_ids, phase_info.round.value)
    return ChairPositionsResponse(positions=positions, phaseInfo=PhaseSummary.from_info(phase_info))


# 2️⃣ Save the chair's ranking of a position's applicants
@router.post("/{position_id}/rank", response_model=ActionResponse)
async def rank_applicants(
    position_id: int,
    payload: ChairRankRequest,
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
):
    if not phase_info.allow_chair_ranking:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Chair ranking is only open during a concurrent ranking phase "
            f"(current phase: {phase_info.phase.value})"
        )

    position = await get_position(session, position_id)
    if not position:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Position not found")

    if not await check_cca_chair_authorization(session, current_user.id, position.cca_id):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Unauthorized: Not a lead/vice for this CCA")

    if position.position_type not in rankable_position_types(phase_info.round.value):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            f"{position.position_type} positions cannot be ranked in the "
            f"{phase_info.round.value} round"
        )

    try:
        count = await save_chair_rankings(session, position, payload.rankings)
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

    return ActionResponse(message=f"Updated rankings for {count} applicants")
