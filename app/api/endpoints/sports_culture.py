# app/api/endpoints/sports_culture.py

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_current_user, get_phase_info
from app.core.eligibility import is_application_window_open
from app.models.enums import AllocationEventType
from app.models.user import User
from app.schemas.membership import ActionResponse, ApplyRequest, AvailablePositionsResponse
from app.schemas.phase import PhaseInfo, PhaseSummary
from app.services.allocation_event_service import log_allocation_event, clear_allocation_events
from app.services.membership_service import (
    apply_to_position,
    list_available_positions,
    withdraw_application,
)

router = APIRouter(
    prefix="/api/sportsCulture",
    tags=["Sports & Culture"]
)


def require_application_window(phase_info: PhaseInfo = Depends(get_phase_info)) -> PhaseInfo:
    if not is_application_window_open(phase_info.phase):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Sports/Culture applications are only open during subcomm concurrent ranking"
        )
    return phase_info


@router.get("/available", response_model=AvailablePositionsResponse)
async def get_available_positions(
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
):
    positions = await list_available_positions(session, current_user.id)
    return AvailablePositionsResponse(
        positions=positions,
        applicationsOpen=is_application_window_open(phase_info.phase),
        phaseInfo=PhaseSummary.from_info(phase_info),
    )


@router.post("/apply", response_model=ActionResponse)
async def apply(
    payload: ApplyRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    _: PhaseInfo = Depends(require_application_window),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        position = await apply_to_position(session, current_user.id, payload.position_id)
    except LookupError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

    background_tasks.add_task(
        log_allocation_event,
        user_id=current_user.id,
        position_id=position.id,
        event_type=AllocationEventType.applied,
        reason="Applied during open application period",
    )
    return ActionResponse(message=f"Applied to {position.name}")


@router.delete("/apply", response_model=ActionResponse)
async def withdraw(
    payload: ApplyRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    _: PhaseInfo = Depends(require_application_window),
    session: AsyncSession = Depends(get_db_session),
):
    removed = await withdraw_application(session, current_user.id, payload.position_id)
    if not removed:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Application not found")

    background_tasks.add_task(
        clear_allocation_events,
        user_id=current_user.id,
        position_id=payload.position_id,
    )
    return ActionResponse(message="Application withdrawn")
