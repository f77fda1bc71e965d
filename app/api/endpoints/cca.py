# app/api/endpoints/cca.py

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_current_user, get_phase_info
from app.core.eligibility import is_sports_culture_management_window_open
from app.models.cca import CCA
from app.models.enums import AllocationEventType, CCAType
from app.models.user import User
from app.schemas.membership import (
    ActionResponse,
    AddMemberRequest,
    CCAMembersResponse,
    CCASummary,
    CutMemberRequest,
    MemberPermissions,
    RemoveMemberRequest,
)
from app.schemas.phase import PhaseInfo
from app.services.allocation_event_service import log_allocation_event
from app.services.lead_auth_service import check_cca_chair_authorization
from app.services.membership_service import (
    add_member,
    cut_member,
    get_cca_by_name,
    get_member_position,
    is_sports_culture,
    list_members,
    remove_member,
)

router = APIRouter(
    prefix="/api/cca",
    tags=["CCA Membership"]
)


# ===================================================================
#  HELPER: resolve the CCA and run every management check
# ===================================================================
async def get_managed_cca(
    cca_name: str,
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
) -> CCA:
    cca = await get_cca_by_name(session, cca_name)
    if not cca:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "CCA not found")

    if not is_sports_culture(cca):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "This endpoint is only for sports and culture CCAs"
        )

    if not is_sports_culture_management_window_open(phase_info.phase):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Sports/Culture member management is only available during subcomm "
            "results processing or once full results are available"
        )

    if not await check_cca_chair_authorization(session, current_user.id, cca.id):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Unauthorized: You are not a lead/vice for this CCA"
        )

    return cca


@router.post("/{cca_name}/addMember", response_model=ActionResponse)
async def add_member_endpoint(
    payload: AddMemberRequest,
    background_tasks: BackgroundTasks,
    cca: CCA = Depends(get_managed_cca),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        appointment = await add_member(session, cca, payload.user_id)
    except LookupError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

    background_tasks.add_task(
        log_allocation_event,
        user_id=payload.user_id,
        position_id=appointment.position_id,
        event_type=AllocationEventType.accepted,
        reason=payload.reason or "Added by captain/head",
    )
    return ActionResponse(message=f"Member added to {cca.name}")


@router.post("/{cca_name}/removeMember", response_model=ActionResponse)
async def remove_member_endpoint(
    payload: RemoveMemberRequest,
    background_tasks: BackgroundTasks,
    cca: CCA = Depends(get_managed_cca),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        position = await remove_member(session, cca, payload.user_id)
    except LookupError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))

    background_tasks.add_task(
        log_allocation_event,
        user_id=payload.user_id,
        position_id=position.id,
        event_type=AllocationEventType.cut,
        reason=payload.reason or "Removed by captain/head",
    )
    return ActionResponse(message=f"Member removed from {cca.name}")


@router.post("/{cca_name}/cutMember", response_model=ActionResponse)
async def cut_member_endpoint(
    payload: CutMemberRequest,
    background_tasks: BackgroundTasks,
    cca: CCA = Depends(get_managed_cca),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        position = await cut_member(session, cca, payload.user_id, payload.position_id)
    except LookupError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))

    background_tasks.add_task(
        log_allocation_event,
        user_id=payload.user_id,
        position_id=position.id,
        event_type=AllocationEventType.cut,
        reason=payload.reason or "Cut by captain/head",
    )
    return ActionResponse(message=f"Member cut from {position.name}")


@router.get("/{cca_name}/members", response_model=CCAMembersResponse)
async def get_members(
    cca_name: str,
    current_user: User = Depends(get_current_user),
    phase_info: PhaseInfo = Depends(get_phase_info),
    session: AsyncSession = Depends(get_db_session),
):
    cca = await get_cca_by_name(session, cca_name)
    if not cca:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "CCA not found")

    if not await check_cca_chair_authorization(session, current_user.id, cca.id):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Unauthorized: You are not a lead/vice for this CCA"
        )

    grouped = await list_members(session, cca)
    member_position = await get_member_position(session, cca.id)
    can_manage = (
        is_sports_culture_management_window_open(phase_info.phase)
        or cca.cca_type == CCAType.committee.value
    )

    return CCAMembersResponse(
        cca=CCASummary(id=cca.id, name=cca.name, cca_type=cca.cca_type),
        groupedMembers=grouped,
        member_position_id=member_position.id if member_position else None,
        total_members=sum(len(group) for group in grouped.model_dump().values()),
        permissions=MemberPermissions(canManageMembers=can_manage, ccaType=cca.cca_type),
    )
