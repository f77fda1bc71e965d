from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from app.schemas.phase import PhaseSummary


class AddMemberRequest(BaseModel):
    user_id: int
    reason: Optional[str] = None


class RemoveMemberRequest(BaseModel):
    user_id: int
    reason: Optional[str] = None


class CutMemberRequest(BaseModel):
    user_id: int
    position_id: int
    reason: Optional[str] = None


class ApplyRequest(BaseModel):
    position_id: int


class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


# ------------------------------------------------------------
# Sports/culture positions open for application
# ------------------------------------------------------------
class AvailablePosition(BaseModel):
    id: int
    name: str
    cca_id: int
    cca_name: str
    cca_type: str
    position_type: str
    description: Optional[str] = None
    capacity: Optional[int] = None
    is_applied: bool = False
    user_current_role: Optional[str] = None
    conflict_reason: Optional[str] = None
    can_apply: bool = True


class AvailablePositionsResponse(BaseModel):
    positions: Dict[str, List[AvailablePosition]]
    applicationsOpen: bool
    phaseInfo: PhaseSummary


# ------------------------------------------------------------
# Members of a CCA (lead/vice view)
# ------------------------------------------------------------
class CCAMember(BaseModel):
    user_id: int
    name: str
    email: str
    room: Optional[str] = None
    position_id: int
    position_name: str
    position_type: str
    points: int = 0
    appointed_date: Optional[datetime] = None
    cut: bool = False


class GroupedMembers(BaseModel):
    lead: List[CCAMember] = []
    vice: List[CCAMember] = []
    maincomm: List[CCAMember] = []
    subcomm: List[CCAMember] = []
    teamManager: List[CCAMember] = []
    members: List[CCAMember] = []
    cut: List[CCAMember] = []


class CCASummary(BaseModel):
    id: int
    name: str
    cca_type: str


class MemberPermissions(BaseModel):
    canManageMembers: bool
    ccaType: str


class CCAMembersResponse(BaseModel):
    success: bool = True
    cca: CCASummary
    groupedMembers: GroupedMembers
    member_position_id: Optional[int] = None
    total_members: int
    permissions: MemberPermissions
