# app/core/eligibility.py

from typing import Union

from app.models.enums import AllocationPhase, AllocationRound, PositionType

# ==========================================================
# CHAIR ROLES (never rankable, never applied for)
# ==========================================================
AUTHORIZED_CHAIR_ROLES = (PositionType.lead.value, PositionType.vice.value)

# ==========================================================
# ROUND → POSITION TYPES OPEN FOR RANKING / APPLICATION
# ==========================================================
ROUND_POSITION_TYPES = {
    AllocationRound.maincomm.value: frozenset({
        PositionType.maincomm.value,
        PositionType.blockcomm.value,
    }),
    # Subcomm round re-opens unfilled maincomm and blockcomm seats
    AllocationRound.subcomm.value: frozenset({
        PositionType.subcomm.value,
        PositionType.blockcomm.value,
        PositionType.maincomm.value,
    }),
}

# Sports/culture applicant self-service (apply / withdraw)
APPLICATION_WINDOW_PHASES = frozenset({
    AllocationPhase.subcomm_concurrent_ranking.value,
})

# Lead/vice management of sports/culture members (add / remove / cut)
MANAGEMENT_WINDOW_PHASES = frozenset({
    AllocationPhase.subcomm_results_processing.value,
    AllocationPhase.full_results_available.value,
})

SPORTS_CULTURE_CCA_TYPES = ("sports", "culture")
SPORTS_CULTURE_POSITION_TYPES = (PositionType.member.value, PositionType.team_manager.value)


def _value(item: Union[str, AllocationPhase, AllocationRound]) -> str:
    if isinstance(item, (AllocationPhase, AllocationRound)):
        return item.value
    return str(item)


def eligible_position_types(current_round: Union[str, AllocationRound]) -> set[str]:
    """
    Position types that may be ranked or applied for in `current_round`.

    An unrecognised round is passed through as the only type, so callers
    filtering on it will usually match nothing.
    """
    round_value = _value(current_round)
    return set(ROUND_POSITION_TYPES.get(round_value, {round_value}))


def rankable_position_types(current_round: Union[str, AllocationRound]) -> set[str]:
    """Eligible types for the round with the chair roles removed."""
    return eligible_position_types(current_round) - set(AUTHORIZED_CHAIR_ROLES)


def is_application_window_open(phase: Union[str, AllocationPhase]) -> bool:
    return _value(phase) in APPLICATION_WINDOW_PHASES


def is_sports_culture_management_window_open(phase: Union[str, AllocationPhase]) -> bool:
    return _value(phase) in MANAGEMENT_WINDOW_PHASES
