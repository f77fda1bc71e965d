# app/api/endpoints/system.py

import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_phase_service
from app.core.config import settings, APP_VERSION
from app.core.database import test_connection
from app.core.rate_limiter import limiter
from app.models.enums import AllocationPhase, AllocationRound
from app.services.phase_service import PhaseService, DatabaseFlagStore

router = APIRouter(
    prefix="/api",
    tags=["System"]
)

START_TIME = time.time()

PHASE_CACHE_HEADERS = {
    "Cache-Control": "private, s-maxage=30, stale-while-revalidate=60",
}


# ------------------------------------------------------------
# CURRENT ALLOCATION PHASE
# ------------------------------------------------------------
@router.get("/system/currentPhase")
@limiter.limit("120/minute")
async def current_phase(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    phase_service: PhaseService = Depends(get_phase_service),
):
    try:
        phase_info = await phase_service.get_current_phase_info(DatabaseFlagStore(session))
        body = {
            **phase_info.to_response(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "isTestingMode": settings.is_testing_mode,
        }
        return JSONResponse(content=body, headers=PHASE_CACHE_HEADERS)

    except Exception:
        logger.exception("Error getting current phase")
        return JSONResponse(
            status_code=500,
            content={
                "phase": AllocationPhase.inactive.value,
                "round": AllocationRound.inactive.value,
                "allowChairRanking": False,
                "allowApplicantRanking": False,
                "showResults": False,
                "userMessage": "Error determining current phase",
                "serverTime": datetime.now(timezone.utc).isoformat(),
                "activeFlags": [],
                "error": "Failed to determine current phase",
            },
            headers={"Cache-Control": "no-cache"},
        )


# ------------------------------------------------------------
# METRICS (status dashboard)
# ------------------------------------------------------------
@router.get("/metrics")
async def metrics(
    session: AsyncSession = Depends(get_db_session),
    phase_service: PhaseService = Depends(get_phase_service),
):
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent

    db_start = time.time()
    db_latency = 0
    try:
        await test_connection()
        database = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception:
        logger.exception("Metrics: database ping failed")
        database = "Error"

    phase_info = await phase_service.get_current_phase_info(DatabaseFlagStore(session))

    return {
        "status": "Online",
        "version": APP_VERSION,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "uptime": uptime_seconds,
        "database": database,
        "db_latency": db_latency,
        "phase": phase_info.phase.value,
        "round": phase_info.round.value,
    }
