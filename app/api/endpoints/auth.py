# app/api/endpoints/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.core.rate_limiter import limiter
from app.schemas.auth import LoginRequest, TokenWithUser
from app.services.auth_service import authenticate_user, issue_token

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"]
)


@router.post("/login", response_model=TokenWithUser)
@limiter.limit("10/minute")
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    user = await authenticate_user(session, payload.email, payload.password)
    if not user:
        logger.warning(f"Failed login attempt for {payload.email}")
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid email or password")

    return issue_token(user)
