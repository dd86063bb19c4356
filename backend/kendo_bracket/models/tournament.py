from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, BigInteger
from sqlmodel import Column, Field, SQLModel


class TournamentSnapshot(SQLModel, table=True):
    """One row per tournament; payload holds the full serialized Tournament."""

    __tablename__ = "tournament_snapshot"

    id: str = Field(primary_key=True)
    title: str
    status: str = Field(default="SETUP")  # SETUP | ACTIVE | FINISHED
    total_matches: int = Field(default=0)
    last_updated: int = Field(default=0, sa_column=Column(BigInteger, index=True, nullable=False))  # epoch millis
    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)
