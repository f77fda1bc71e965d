# app/models/allocation_event.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from datetime import datetime
from typing import Optional


class AllocationEvent(SQLModel, table=True):
    __tablename__ = "cca_allocation_events"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    )
    position_id: int = Field(
        sa_column=Column(Integer, ForeignKey("cca_positions.id"), nullable=False, index=True)
    )

    # "applied", "accepted", "cut"
    event_type: str = Field(
        sa_column=Column(String, nullable=False)
    )

    reason: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
