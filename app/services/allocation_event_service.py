# app/services/allocation_event_service.py

from typing import Optional

from loguru import logger
from sqlalchemy import delete

from app.core.database import AsyncSessionLocal
from app.models.allocation_event import AllocationEvent
from app.models.enums import AllocationEventType


async def log_allocation_event(
    user_id: int,
    position_id: int,
    event_type: AllocationEventType,
    reason: Optional[str] = None,
):
    """
    Records an allocation event in a separate DB session.
    Safe for use in BackgroundTasks; failures are logged and swallowed so the
    membership change that triggered them still stands.
    """
    async with AsyncSessionLocal() as session:
        try:
            session.add(AllocationEvent(
                user_id=user_id,
                position_id=position_id,
                event_type=event_type.value,
                reason=reason,
            ))
            await session.commit()
        except Exception:
            logger.exception(f"Failed to log allocation event '{event_type.value}'")
            await session.rollback()


async def clear_allocation_events(user_id: int, position_id: int):
    async with AsyncSessionLocal() as session:
        try:
            await session.execute(
                delete(AllocationEvent).where(
                    (AllocationEvent.user_id == user_id)
                    & (AllocationEvent.position_id == position_id)
                )
            )
            await session.commit()
        except Exception:
            logger.exception("Failed to delete allocation events")
            await session.rollback()
