# app/services/phase_service.py

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings, TESTING_ENVS
from app.models.enums import AllocationPhase, AllocationRound
from app.models.feature_flag import FeatureFlag
from app.schemas.phase import PhaseInfo

ERROR_MESSAGE = "Error determining current phase."
TEST_FLAG_SUFFIX = "_test"


# ============================================================================
# PHASE TABLE
# ============================================================================
@dataclass(frozen=True)
class PhaseRule:
    phase: AllocationPhase
    round: AllocationRound
    allow_chair_ranking: bool
    allow_applicant_ranking: bool
    show_results: bool
    user_message: str
    show_maincomm_results: Optional[bool] = None
    show_subcomm_results: Optional[bool] = None

    @property
    def flag_name(self) -> str:
        return self.phase.value


INACTIVE_RULE = PhaseRule(
    phase=AllocationPhase.inactive,
    round=AllocationRound.inactive,
    allow_chair_ranking=False,
    allow_applicant_ranking=False,
    show_results=False,
    user_message="CCA allocation is currently not active.",
)

# Evaluated top to bottom; the first rule whose flag is active wins.
PHASE_TABLE: tuple[PhaseRule, ...] = (
    PhaseRule(
        phase=AllocationPhase.maincomm_interviews,
        round=AllocationRound.maincomm,
        allow_chair_ranking=False,
        allow_applicant_ranking=False,
        show_results=False,
        user_message="MainComm interviews are currently in progress.",
    ),
    PhaseRule(
        phase=AllocationPhase.maincomm_concurrent_ranking,
        round=AllocationRound.maincomm,
        allow_chair_ranking=True,
        allow_applicant_ranking=True,
        show_results=False,
        user_message=(
            "MainComm applications are open! Students can apply to positions "
            "while chairs rank applicants."
        ),
    ),
    PhaseRule(
        phase=AllocationPhase.maincomm_results_processing,
        round=AllocationRound.maincomm,
        allow_chair_ranking=False,
        allow_applicant_ranking=False,
        show_results=False,
        user_message="MainComm results are being processed. Please wait.",
    ),
    PhaseRule(
        phase=AllocationPhase.maincomm_results_available,
        round=AllocationRound.maincomm,
        allow_chair_ranking=False,
        allow_applicant_ranking=False,
        show_results=True,
        show_maincomm_results=True,
        show_subcomm_results=False,
        user_message="MainComm results are available! SubComm interviews starting soon.",
    ),
    PhaseRule(
        phase=AllocationPhase.subcomm_interviews,
        round=AllocationRound.subcomm,
        allow_chair_ranking=False,
        allow_applicant_ranking=False,
        show_results=True,
        show_maincomm_results=True,
        show_subcomm_results=False,
        user_message="SubComm interviews are in progress. MainComm results remain available.",
    ),
    PhaseRule(
        phase=AllocationPhase.subcomm_concurrent_ranking,
        round=AllocationRound.subcomm,
        allow_chair_ranking=True,
        allow_applicant_ranking=True,
        show_results=True,
        show_maincomm_results=True,
        show_subcomm_results=False,
        user_message=(
            "SubComm applications are open! Students can apply to positions "
            "while chairs rank applicants."
        ),
    ),
    PhaseRule(
        phase=AllocationPhase.subcomm_results_processing,
        round=AllocationRound.subcomm,
        allow_chair_ranking=False,
        allow_applicant_ranking=False,
        show_results=True,
        show_maincomm_results=True,
        show_subcomm_results=False,
        user_message="SubComm results are being processed. MainComm results remain available.",
    ),
    PhaseRule(
        phase=AllocationPhase.full_results_available,
        round=AllocationRound.complete,
        allow_chair_ranking=False,
        allow_applicant_ranking=False,
        show_results=True,
        show_maincomm_results=True,
        show_subcomm_results=True,
        user_message="All CCA allocation results are now available!",
    ),
)


# ============================================================================
# FLAG STORE
# ============================================================================
class FlagStore(Protocol):
    async def list_flags(self) -> Sequence[FeatureFlag]:
        ...


class DatabaseFlagStore:
    """Reads every feature flag; expiry filtering happens in the resolver."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_flags(self) -> Sequence[FeatureFlag]:
        result = await self.session.execute(
            select(FeatureFlag).order_by(FeatureFlag.expires_at)
        )
        return result.scalars().all()


# ============================================================================
# HELPERS
# ============================================================================
def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _display_zone(name: str):
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def format_phase_date(moment: datetime, tz_name: str = "UTC") -> str:
    """e.g. 'Monday, October 19, 2026 at 02:30 PM UTC'"""
    local = _as_utc(moment).astimezone(_display_zone(tz_name))
    return (
        f"{local:%A}, {local:%B} {local.day}, {local.year} "
        f"at {local:%I:%M %p} {local.tzname()}"
    )


def normalize_override(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    if value.endswith(TEST_FLAG_SUFFIX):
        value = value[: -len(TEST_FLAG_SUFFIX)]
    return value or None


def _build(rule: PhaseRule, now: datetime, next_phase_date: Optional[str],
           active_flags: list[str]) -> PhaseInfo:
    return PhaseInfo(
        phase=rule.phase,
        round=rule.round,
        allow_chair_ranking=rule.allow_chair_ranking,
        allow_applicant_ranking=rule.allow_applicant_ranking,
        show_results=rule.show_results,
        show_maincomm_results=rule.show_maincomm_results,
        show_subcomm_results=rule.show_subcomm_results,
        user_message=rule.user_message,
        next_phase_date=next_phase_date,
        server_time=now.isoformat(),
        active_flags=active_flags,
    )


def match_rule(active_flag_names: Sequence[str]) -> PhaseRule:
    present = set(active_flag_names)
    for rule in PHASE_TABLE:
        if rule.flag_name in present:
            return rule
    return INACTIVE_RULE


def error_phase_info(now: datetime) -> PhaseInfo:
    return PhaseInfo(
        phase=AllocationPhase.inactive,
        round=AllocationRound.inactive,
        user_message=ERROR_MESSAGE,
        server_time=now.isoformat(),
        active_flags=[],
    )


# ============================================================================
# PHASE SERVICE
# ============================================================================
class PhaseService:
    """
    Resolves the current allocation phase from time-bounded feature flags.

    `override` forces a phase name for manual testing. Build the service with
    `from_settings()` so the override is only honoured in dev/test.
    """

    def __init__(
        self,
        override: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        display_timezone: str = "UTC",
    ):
        self.override = normalize_override(override)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.display_timezone = display_timezone

    @classmethod
    def from_settings(cls, config=settings) -> "PhaseService":
        override = config.PHASE_OVERRIDE
        if override and config.ENV not in TESTING_ENVS:
            logger.warning(f"PHASE_OVERRIDE ignored in '{config.ENV}' environment")
            override = None
        return cls(override=override, display_timezone=config.DISPLAY_TIMEZONE)

    def now(self) -> datetime:
        return _as_utc(self.clock())

    def resolve(self, now: datetime, flags: Sequence[FeatureFlag]) -> PhaseInfo:
        """Pure mapping of (now, flags) to PhaseInfo."""
        now = _as_utc(now)

        upcoming = sorted(
            (flag for flag in flags if _as_utc(flag.expires_at) > now),
            key=lambda flag: _as_utc(flag.expires_at),
        )
        next_phase_date = (
            format_phase_date(upcoming[0].expires_at, self.display_timezone)
            if upcoming else None
        )

        if self.override:
            active_flags = [self.override]
        else:
            active_flags = [flag.name for flag in upcoming]

        rule = match_rule(active_flags)
        return _build(rule, now, next_phase_date, active_flags)

    async def get_current_phase_info(self, store: FlagStore) -> PhaseInfo:
        now = self.now()
        try:
            flags = await store.list_flags()
            info = self.resolve(now, flags)
        except Exception:
            logger.exception("Error getting current phase info")
            return error_phase_info(now)

        if self.override:
            logger.info(f"Testing Mode: using phase override '{self.override}'")
        return info
