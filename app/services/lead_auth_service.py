# app/services/lead_auth_service.py
# Authorization checks for CCA chair (lead / vice) roles

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.eligibility import AUTHORIZED_CHAIR_ROLES
from app.models.cca import CCAAppointment, CCAPosition


async def check_cca_chair_authorization(session: AsyncSession, user_id: int, cca_id: int) -> bool:
    """True if the user holds a lead/vice appointment in the given CCA."""
    result = await session.execute(
        select(CCAAppointment.id)
        .join(CCAPosition, CCAPosition.id == CCAAppointment.position_id)
        .where(
            (CCAAppointment.user_id == user_id)
            & (CCAPosition.cca_id == cca_id)
            & (CCAPosition.position_type.in_(AUTHORIZED_CHAIR_ROLES))
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def get_user_authorized_cca_ids(session: AsyncSession, user_id: int) -> list[int]:
    """All CCAs in which the user is a lead or vice."""
    result = await session.execute(
        select(CCAPosition.cca_id)
        .join(CCAAppointment, CCAAppointment.position_id == CCAPosition.id)
        .where(
            (CCAAppointment.user_id == user_id)
            & (CCAPosition.position_type.in_(AUTHORIZED_CHAIR_ROLES))
        )
        .distinct()
    )
    return sorted(result.scalars().all())
