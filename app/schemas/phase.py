from typing import List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.models.enums import AllocationPhase, AllocationRound


class PhaseInfo(BaseModel):
    phase: AllocationPhase
    round: AllocationRound
    allow_chair_ranking: bool = False
    allow_applicant_ranking: bool = False
    show_results: bool = False
    show_maincomm_results: Optional[bool] = None
    show_subcomm_results: Optional[bool] = None
    user_message: str
    next_phase_date: Optional[str] = None
    server_time: str
    active_flags: List[str] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    def to_response(self) -> dict:
        """camelCase JSON body with unset optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PhaseSummary(BaseModel):
    """Short phase block embedded in list responses."""
    phase: AllocationPhase
    round: AllocationRound
    userMessage: str

    @classmethod
    def from_info(cls, info: PhaseInfo) -> "PhaseSummary":
        return cls(phase=info.phase, round=info.round, userMessage=info.user_message)
