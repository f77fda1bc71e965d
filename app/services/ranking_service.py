# app/services/ranking_service.py

from typing import Iterable, Sequence

from loguru import logger
from sqlmodel import select
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.eligibility import rankable_position_types
from app.models.cca import CCA, CCAAppointment, CCAPosition
from app.models.ranking import ApplicantRanking, ChairRanking
from app.models.user import User
from app.schemas.ranking import (
    Applicant,
    ApplicantRankingItem,
    ChairPosition,
    ChairRankingItem,
    RankablePosition,
)


# ============================================================================
# CAPACITY HELPERS
# ============================================================================
async def _appointment_counts(session: AsyncSession, position_ids: Iterable[int]) -> dict[int, int]:
    ids = list(position_ids)
    if not ids:
        return {}
    result = await session.execute(
        select(CCAAppointment.position_id, func.count(CCAAppointment.id))
        .where(CCAAppointment.position_id.in_(ids))
        .group_by(CCAAppointment.position_id)
    )
    return {position_id: count for position_id, count in result.all()}


async def _application_counts(session: AsyncSession, position_ids: Iterable[int]) -> dict[int, int]:
    ids = list(position_ids)
    if not ids:
        return {}
    result = await session.execute(
        select(ApplicantRanking.position_id, func.count(ApplicantRanking.id))
        .where(ApplicantRanking.position_id.in_(ids))
        .group_by(ApplicantRanking.position_id)
    )
    return {position_id: count for position_id, count in result.all()}


async def get_position(session: AsyncSession, position_id: int) -> CCAPosition | None:
    result = await session.execute(select(CCAPosition).where(CCAPosition.id == position_id))
    return result.scalar_one_or_none()


# ============================================================================
# APPLICANT SIDE
# ============================================================================
async def list_rankable_positions(
    session: AsyncSession,
    user_id: int,
    current_round: str,
) -> list[RankablePosition]:
    """Positions open for ranking this round that still have free seats."""
    types = sorted(rankable_position_types(current_round))

    result = await session.execute(
        select(CCAPosition, CCA)
        .join(CCA, CCA.id == CCAPosition.cca_id)
        .where(CCAPosition.position_type.in_(types))
        .order_by(CCAPosition.name)
    )
    rows = result.all()

    position_ids = [position.id for position, _ in rows]
    filled = await _appointment_counts(session, position_ids)
    applied = await _application_counts(session, position_ids)

    prefs_res = await session.execute(
        select(ApplicantRanking).where(ApplicantRanking.user_id == user_id)
    )
    user_rankings = {pref.position_id: pref.ranking for pref in prefs_res.scalars().all()}

    positions = []
    for position, cca in rows:
        available = position.capacity - filled.get(position.id, 0)
        if available <= 0:
            continue
        positions.append(RankablePosition(
            id=position.id,
            name=position.name,
            cca_name=cca.name,
            position_type=position.position_type,
            capacity=position.capacity,
            available_capacity=available,
            applied_count=applied.get(position.id, 0),
            description=position.description or cca.description,
            user_ranking=user_rankings.get(position.id),
            is_selected=position.id in user_rankings,
        ))
    return positions


async def save_applicant_rankings(
    session: AsyncSession,
    user_id: int,
    rankings: Sequence[ApplicantRankingItem],
    current_round: str,
) -> int:
    """
    Replaces the user's preferences.
    Raises LookupError for unknown positions and ValueError for positions that
    are not rankable this round, have no free seats, or repeated entries.
    """
    position_ids = [item.position_id for item in rankings]
    if len(set(position_ids)) != len(position_ids):
        raise ValueError("Each position can only be ranked once")

    ranks = [item.ranking for item in rankings]
    if len(set(ranks)) != len(ranks):
        raise ValueError("Ranking values must be unique")

    allowed = rankable_position_types(current_round)
    if position_ids:
        result = await session.execute(
            select(CCAPosition).where(CCAPosition.id.in_(position_ids))
        )
        positions = {position.id: position for position in result.scalars().all()}
    else:
        positions = {}

    for position_id in position_ids:
        position = positions.get(position_id)
        if position is None:
            raise LookupError(f"Position {position_id} not found")
        if position.position_type not in allowed:
            raise ValueError(
                f"Position '{position.name}' ({position.position_type}) "
                f"is not open for ranking in the {current_round} round"
            )

    filled = await _appointment_counts(session, position_ids)
    for position_id in position_ids:
        position = positions[position_id]
        if position.capacity - filled.get(position_id, 0) <= 0:
            raise ValueError(f"Position '{position.name}' has no remaining capacity")

    await session.execute(
        delete(ApplicantRanking).where(ApplicantRanking.user_id == user_id)
    )
    for item in rankings:
        session.add(ApplicantRanking(
            user_id=user_id,
            position_id=item.position_id,
            ranking=item.ranking,
            application_status="pending",
        ))
    await session.commit()

    logger.info(f"User {user_id} saved {len(rankings)} position rankings")
    return len(rankings)


# ============================================================================
# CHAIR SIDE
# ============================================================================
async def list_positions_for_chair(
    session: AsyncSession,
    cca_ids: Sequence[int],
    current_round: str,
) -> list[ChairPosition]:
    """Rankable positions of the chair's CCAs with their applicants."""
    if not cca_ids:
        return []

    types = sorted(rankable_position_types(current_round))
    result = await session.execute(
        select(CCAPosition, CCA)
        .join(CCA, CCA.id == CCAPosition.cca_id)
        .where(
            (CCAPosition.cca_id.in_(list(cca_ids)))
            & (CCAPosition.position_type.in_(types))
        )
        .order_by(CCA.name, CCAPosition.name)
    )
    rows = result.all()
    position_ids = [position.id for position, _ in rows]
    filled = await _appointment_counts(session, position_ids)

    applicants_by_position: dict[int, list[Applicant]] = {pid: [] for pid in position_ids}
    if position_ids:
        chair_res = await session.execute(
            select(ChairRanking).where(ChairRanking.position_id.in_(position_ids))
        )
        chair_ranks = {
            (rank.position_id, rank.user_id): rank.ranking
            for rank in chair_res.scalars().all()
        }

        apps_res = await session.execute(
            select(ApplicantRanking, User)
            .join(User, User.id == ApplicantRanking.user_id)
            .where(ApplicantRanking.position_id.in_(position_ids))
            .order_by(ApplicantRanking.position_id, ApplicantRanking.ranking)
        )
        for pref, user in apps_res.all():
            applicants_by_position[pref.position_id].append(Applicant(
                user_id=user.id,
                name=user.name,
                email=user.email,
                room=user.room,
                preference=pref.ranking,
                chair_ranking=chair_ranks.get((pref.position_id, user.id)),
            ))

    positions = []
    for position, cca in rows:
        available = position.capacity - filled.get(position.id, 0)
        if available <= 0:
            continue
        positions.append(ChairPosition(
            id=position.id,
            name=position.name,
            cca_id=cca.id,
            cca_name=cca.name,
            position_type=position.position_type,
            capacity=position.capacity,
            available_capacity=available,
            applicants=applicants_by_position[position.id],
        ))
    return positions


async def save_chair_rankings(
    session: AsyncSession,
    position: CCAPosition,
    rankings: Sequence[ChairRankingItem],
) -> int:
    """Replaces every chair ranking for the position."""
    user_ids = [item.user_id for item in rankings]
    if len(set(user_ids)) != len(user_ids):
        raise ValueError("Each applicant can only be ranked once")

    applied_res = await session.execute(
        select(ApplicantRanking.user_id).where(ApplicantRanking.position_id == position.id)
    )
    applicants = set(applied_res.scalars().all())
    for user_id in user_ids:
        if user_id not in applicants:
            raise ValueError(f"User {user_id} has not applied to this position")

    await session.execute(
        delete(ChairRanking).where(ChairRanking.position_id == position.id)
    )
    for item in rankings:
        session.add(ChairRanking(
            user_id=item.user_id,
            position_id=position.id,
            ranking=item.ranking,
        ))
    await session.commit()

    logger.info(f"Saved {len(rankings)} chair rankings for position {position.id}")
    return len(rankings)
