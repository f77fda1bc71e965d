# app/services/membership_service.py
# Sports/culture membership: lead/vice management and applicant self-service

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.eligibility import SPORTS_CULTURE_CCA_TYPES, SPORTS_CULTURE_POSITION_TYPES
from app.models.cca import CCA, CCAAppointment, CCAPosition
from app.models.enums import PositionType
from app.models.user import User
from app.schemas.membership import AvailablePosition, CCAMember, GroupedMembers
from app.services.auth_service import get_user_by_id

CUT_MARKER = "cut"


# ============================================================================
# LOOKUPS
# ============================================================================
async def get_cca_by_name(session: AsyncSession, name: str) -> CCA | None:
    result = await session.execute(select(CCA).where(CCA.name == name))
    return result.scalar_one_or_none()


async def get_member_position(session: AsyncSession, cca_id: int) -> CCAPosition | None:
    result = await session.execute(
        select(CCAPosition).where(
            (CCAPosition.cca_id == cca_id)
            & (CCAPosition.position_type == PositionType.member.value)
        )
    )
    return result.scalars().first()


async def get_or_create_member_position(session: AsyncSession, cca: CCA) -> CCAPosition:
    position = await get_member_position(session, cca.id)
    if position:
        return position

    position = CCAPosition(
        cca_id=cca.id,
        name="Member",
        position_type=PositionType.member.value,
        capacity=0,
    )
    session.add(position)
    await session.flush()
    return position


async def _get_appointment(session: AsyncSession, user_id: int, position_id: int) -> CCAAppointment | None:
    result = await session.execute(
        select(CCAAppointment).where(
            (CCAAppointment.user_id == user_id)
            & (CCAAppointment.position_id == position_id)
        )
    )
    return result.scalars().first()


def is_sports_culture(cca: CCA) -> bool:
    return cca.cca_type in SPORTS_CULTURE_CCA_TYPES


def is_cut(appointment: CCAAppointment) -> bool:
    return (appointment.comments or "").lower() == CUT_MARKER


# ============================================================================
# LEAD / VICE MANAGEMENT
# ============================================================================
async def add_member(session: AsyncSession, cca: CCA, user_id: int) -> CCAAppointment:
    """Appoints the user as a member. A previously cut member is reinstated."""
    if not await get_user_by_id(session, user_id):
        raise LookupError("User not found")

    position = await get_or_create_member_position(session, cca)

    appointment = await _get_appointment(session, user_id, position.id)
    if appointment and not is_cut(appointment):
        raise ValueError("User is already appointed to this position")

    if appointment:
        appointment.comments = None
    else:
        appointment = CCAAppointment(user_id=user_id, position_id=position.id, points=0)
    session.add(appointment)
    await session.commit()
    await session.refresh(appointment)
    return appointment


async def remove_member(session: AsyncSession, cca: CCA, user_id: int) -> CCAPosition:
    position = await get_member_position(session, cca.id)
    if not position:
        raise LookupError("Member position not found")

    appointment = await _get_appointment(session, user_id, position.id)
    if not appointment:
        raise LookupError("User is not a member of this CCA")

    await session.delete(appointment)
    await session.commit()
    return position


async def cut_member(session: AsyncSession, cca: CCA, user_id: int, position_id: int) -> CCAPosition:
    """Marks a member or team manager appointment as cut. The row is kept."""
    result = await session.execute(
        select(CCAPosition).where(
            (CCAPosition.id == position_id) & (CCAPosition.cca_id == cca.id)
        )
    )
    position = result.scalar_one_or_none()
    if not position:
        raise LookupError("Position not found in this CCA")

    if position.position_type not in SPORTS_CULTURE_POSITION_TYPES:
        raise ValueError("Only members and team managers can be cut")

    appointment = await _get_appointment(session, user_id, position.id)
    if not appointment:
        raise LookupError("User does not hold this position")

    if is_cut(appointment):
        raise ValueError("Member has already been cut")

    appointment.comments = CUT_MARKER
    session.add(appointment)
    await session.commit()
    return position


async def list_members(session: AsyncSession, cca: CCA) -> GroupedMembers:
    """Every appointment in the CCA, grouped by position type."""
    result = await session.execute(
        select(CCAAppointment, CCAPosition, User)
        .join(CCAPosition, CCAPosition.id == CCAAppointment.position_id)
        .join(User, User.id == CCAAppointment.user_id)
        .where(CCAPosition.cca_id == cca.id)
    )

    grouped = GroupedMembers()
    for appointment, position, user in result.all():
        member = CCAMember(
            user_id=user.id,
            name=user.name,
            email=user.email,
            room=user.room,
            position_id=position.id,
            position_name=position.name,
            position_type=position.position_type,
            points=appointment.points or 0,
            appointed_date=appointment.created_at,
            cut=is_cut(appointment),
        )
        if member.cut and member.position_type in SPORTS_CULTURE_POSITION_TYPES:
            grouped.cut.append(member)
        elif member.position_type == PositionType.lead.value:
            grouped.lead.append(member)
        elif member.position_type == PositionType.vice.value:
            grouped.vice.append(member)
        elif member.position_type in (PositionType.maincomm.value, PositionType.blockcomm.value):
            grouped.maincomm.append(member)
        elif member.position_type == PositionType.subcomm.value:
            grouped.subcomm.append(member)
        elif member.position_type == PositionType.team_manager.value:
            grouped.teamManager.append(member)
        elif member.position_type == PositionType.member.value:
            grouped.members.append(member)

    for group in (grouped.lead, grouped.vice, grouped.maincomm, grouped.subcomm, grouped.teamManager):
        group.sort(key=lambda m: m.position_name)
    for group in (grouped.members, grouped.cut):
        group.sort(key=lambda m: m.name)
    return grouped


# ============================================================================
# APPLICANT SELF-SERVICE
# ============================================================================
async def list_available_positions(session: AsyncSession, user_id: int) -> dict[str, list[AvailablePosition]]:
    """
    Sports/culture member and team manager positions grouped by CCA type,
    annotated with whether the user has applied or may apply.
    """
    held_res = await session.execute(
        select(CCAPosition)
        .join(CCAAppointment, CCAAppointment.position_id == CCAPosition.id)
        .where(CCAAppointment.user_id == user_id)
    )
    held = held_res.scalars().all()
    applied_ids = {position.id for position in held}
    roles_by_cca = {}
    applications_by_cca = {}
    for position in held:
        if position.position_type in SPORTS_CULTURE_POSITION_TYPES:
            applications_by_cca[position.cca_id] = position
        else:
            roles_by_cca[position.cca_id] = position.position_type

    result = await session.execute(
        select(CCAPosition, CCA)
        .join(CCA, CCA.id == CCAPosition.cca_id)
        .where(
            (CCA.cca_type.in_(SPORTS_CULTURE_CCA_TYPES))
            & (CCAPosition.position_type.in_(SPORTS_CULTURE_POSITION_TYPES))
        )
        .order_by(CCA.name, CCAPosition.name)
    )

    grouped = {cca_type: [] for cca_type in SPORTS_CULTURE_CCA_TYPES}
    for position, cca in result.all():
        current_role = roles_by_cca.get(cca.id)
        existing = applications_by_cca.get(cca.id)
        conflict = None

        if current_role == PositionType.lead.value:
            conflict = f"You are the lead of {cca.name} - cannot apply as {position.name.lower()}"
        elif current_role == PositionType.vice.value:
            conflict = f"You are the vice lead of {cca.name} - cannot apply as {position.name.lower()}"
        elif existing and existing.id != position.id:
            conflict = f"You have already applied as {existing.name} for {cca.name}"

        is_applied = position.id in applied_ids
        grouped[cca.cca_type].append(AvailablePosition(
            id=position.id,
            name=position.name,
            cca_id=cca.id,
            cca_name=cca.name,
            cca_type=cca.cca_type,
            position_type=position.position_type,
            description=position.description,
            capacity=position.capacity,
            is_applied=is_applied,
            user_current_role=current_role or (existing.position_type if existing else None),
            conflict_reason=conflict,
            can_apply=conflict is None and not is_applied,
        ))
    return grouped


async def apply_to_position(session: AsyncSession, user_id: int, position_id: int) -> CCAPosition:
    result = await session.execute(
        select(CCAPosition, CCA)
        .join(CCA, CCA.id == CCAPosition.cca_id)
        .where(CCAPosition.id == position_id)
    )
    row = result.first()
    if not row:
        raise LookupError("Position not found")
    position, cca = row

    if not is_sports_culture(cca) or position.position_type not in SPORTS_CULTURE_POSITION_TYPES:
        raise ValueError("Invalid position for sports/culture application")

    existing_res = await session.execute(
        select(CCAPosition)
        .join(CCAAppointment, CCAAppointment.position_id == CCAPosition.id)
        .where(
            (CCAAppointment.user_id == user_id)
            & (CCAPosition.cca_id == cca.id)
            & (CCAPosition.position_type.in_(SPORTS_CULTURE_POSITION_TYPES))
        )
    )
    for existing in existing_res.scalars().all():
        if existing.id == position.id:
            raise ValueError("Already applied to this position")
        raise ValueError(
            f"You have already applied as {existing.name} for {cca.name}. "
            "Remove that application first."
        )

    session.add(CCAAppointment(user_id=user_id, position_id=position.id, points=0))
    await session.commit()
    return position


async def withdraw_application(session: AsyncSession, user_id: int, position_id: int) -> bool:
    """Removes a sports/culture application. Other appointments are never touched."""
    result = await session.execute(
        select(CCAAppointment)
        .join(CCAPosition, CCAPosition.id == CCAAppointment.position_id)
        .join(CCA, CCA.id == CCAPosition.cca_id)
        .where(
            (CCAAppointment.user_id == user_id)
            & (CCAAppointment.position_id == position_id)
            & (CCA.cca_type.in_(SPORTS_CULTURE_CCA_TYPES))
            & (CCAPosition.position_type.in_(SPORTS_CULTURE_POSITION_TYPES))
        )
    )
    appointment = result.scalars().first()
    if not appointment:
        return False

    await session.delete(appointment)
    await session.commit()
    return True
