from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.phase import PhaseSummary


class ApplicantRankingItem(BaseModel):
    position_id: int
    ranking: int = Field(ge=1)


class SaveApplicantRankingsRequest(BaseModel):
    rankings: List[ApplicantRankingItem]


class ChairRankingItem(BaseModel):
    user_id: int
    ranking: int = Field(ge=1)


class ChairRankRequest(BaseModel):
    rankings: List[ChairRankingItem]


class RankablePosition(BaseModel):
    id: int
    name: str
    cca_name: str
    position_type: str
    capacity: int
    available_capacity: int
    applied_count: int
    description: Optional[str] = None
    user_ranking: Optional[int] = None
    is_selected: bool = False


class RankablePositionsResponse(BaseModel):
    positions: List[RankablePosition] = []
    phaseInfo: PhaseSummary
    error: Optional[str] = None


class Applicant(BaseModel):
    user_id: int
    name: str
    email: str
    room: Optional[str] = None
    preference: int
    chair_ranking: Optional[int] = None


class ChairPosition(BaseModel):
    id: int
    name: str
    cca_id: int
    cca_name: str
    position_type: str
    capacity: int
    available_capacity: int
    applicants: List[Applicant] = []


class ChairPositionsResponse(BaseModel):
    positions: List[ChairPosition] = []
    phaseInfo: PhaseSummary
    error: Optional[str] = None
