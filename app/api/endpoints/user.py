# app/api/endpoints/user.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_current_user, get_phase_info
from app.models.user import User
from app.schemas.auth import UserRead
from app.schemas.membership import ActionResponse
from app.schemas.phase import PhaseInfo, PhaseSummary
from app.schemas.ranking import RankablePositionsResponse, SaveApplicantRankingsRequest
from app.services.ranking_service import list_rankable_positions, save_applicant_rankings

router = APIRouter(
    prefix="/api/user",
    tags=["Applicant Ranking"]
)


@router.get("/me", response_model=UserRead)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


# ------------------------------------------------------------
# Positions the applicant may rank in the current round
# ------------------------------------------------------------
@router.get("/rankablePositions", response_model=RankablePositionsResponse)
async def get_rankable_positions(
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
):
    if not phase_info.allow_applicant_ranking:
        return RankablePositionsResponse(
            positions=[],
            error=f"Student ranking is not active. Current phase: {phase_info.phase.value}",
            phaseInfo=PhaseSummary.from_info(phase_info),
        )

    positions = await list_rankable_positions(session, current_user.id, phase_info.round.value)
    return RankablePositionsResponse(positions=positions, phaseInfo=PhaseSummary.from_info(phase_info))


# ------------------------------------------------------------
# Save the applicant's position preferences
# ------------------------------------------------------------
@router.post("/saveRankings", response_model=ActionResponse)
async def save_rankings(
    payload: SaveApplicantRankingsRequest,
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
):
    if not phase_info.allow_applicant_ranking:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Applicant ranking is only open during a concurrent ranking phase "
            f"(current phase: {phase_info.phase.value})"
        )

    try:
        count = await save_applicant_rankings(
            session, current_user.id, payload.rankings, phase_info.round.value
        )
    except LookupError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

    return ActionResponse(message=f"Saved {count} rankings")
