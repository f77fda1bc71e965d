from enum import Enum


class AllocationPhase(str, Enum):
    inactive = "inactive"
    maincomm_interviews = "maincomm_interviews"
    maincomm_concurrent_ranking = "maincomm_concurrent_ranking"
    maincomm_results_processing = "maincomm_results_processing"
    maincomm_results_available = "maincomm_results_available"
    subcomm_interviews = "subcomm_interviews"
    subcomm_concurrent_ranking = "subcomm_concurrent_ranking"
    subcomm_results_processing = "subcomm_results_processing"
    full_results_available = "full_results_available"


class AllocationRound(str, Enum):
    inactive = "inactive"
    maincomm = "maincomm"
    subcomm = "subcomm"
    complete = "complete"


class PositionType(str, Enum):
    lead = "lead"
    vice = "vice"
    maincomm = "maincomm"
    subcomm = "subcomm"
    blockcomm = "blockcomm"
    member = "member"
    team_manager = "team manager"


class CCAType(str, Enum):
    sports = "sports"
    culture = "culture"
    committee = "committee"


class AllocationEventType(str, Enum):
    applied = "applied"
    accepted = "accepted"
    cut = "cut"
