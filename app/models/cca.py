# app/models/cca.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from datetime import datetime
from typing import Optional


class CCA(SQLModel, table=True):
    __tablename__ = "ccas"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, index=True, unique=True)

    # "sports", "culture", "committee" (see CCAType)
    cca_type: str = Field(
        sa_column=Column(String, nullable=False)
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )


class CCAPosition(SQLModel, table=True):
    __tablename__ = "cca_positions"

    id: Optional[int] = Field(default=None, primary_key=True)

    cca_id: int = Field(
        sa_column=Column(Integer, ForeignKey("ccas.id"), nullable=False, index=True)
    )

    name: str = Field(nullable=False)

    # "lead", "vice", "maincomm", "subcomm", "blockcomm", "member", "team manager"
    position_type: str = Field(
        sa_column=Column(String, nullable=False, index=True)
    )

    capacity: int = Field(default=1)

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )


class CCAAppointment(SQLModel, table=True):
    __tablename__ = "cca_appointments"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    )
    position_id: int = Field(
        sa_column=Column(Integer, ForeignKey("cca_positions.id"), nullable=False, index=True)
    )

    points: int = Field(default=0)

    # "cut" once a lead/vice has cut the member
    comments: Optional[str] = Field(
        default=None,
        sa_column=Column(String, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
