# app/models/feature_flag.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, String
from datetime import datetime
from typing import Optional


class FeatureFlag(SQLModel, table=True):
    """
    Time-bounded phase marker. A flag is active until `expires_at`.
    Written by administrators directly in the database, never by the API.
    """
    __tablename__ = "feature_flags"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(
        sa_column=Column(String, nullable=False, index=True)
    )

    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
