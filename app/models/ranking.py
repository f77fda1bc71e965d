# app/models/ranking.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import ForeignKey, Integer, String
from typing import Optional


class ChairRanking(SQLModel, table=True):
    """Order in which a lead/vice ranks the applicants of one position."""
    __tablename__ = "cca_user_ranking"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False)
    )
    position_id: int = Field(
        sa_column=Column(Integer, ForeignKey("cca_positions.id"), nullable=False, index=True)
    )

    ranking: int = Field(nullable=False)


class ApplicantRanking(SQLModel, table=True):
    """A student's preference for a position."""
    __tablename__ = "user_cca_applications"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    )
    position_id: int = Field(
        sa_column=Column(Integer, ForeignKey("cca_positions.id"), nullable=False, index=True)
    )

    ranking: int = Field(nullable=False)

    application_status: str = Field(
        default="pending",
        sa_column=Column(String, nullable=False, default="pending")
    )
