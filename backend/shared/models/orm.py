"""
SQLAlchemy 2.0 ORM models for the settlement services.
Maps to the PostgreSQL schema created by run_migration_001.py.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ForecastORM(Base):
    __tablename__ = "forecasts"
    __table_args__ = (
        CheckConstraint(
            "state IN ('PENDING', 'HIT', 'MISS', 'NEEDS_MANUAL_REVIEW')",
            name="chk_forecast_state",
        ),
        CheckConstraint("value_bet_odds IS NULL OR value_bet_odds >= 1", name="chk_value_bet_odds"),
        Index("ix_forecasts_state_kickoff", "state", "kickoff"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    match_label: Mapped[str] = mapped_column(String(300), nullable=False)
    sport_tag: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    league: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    kickoff: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    forecast_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    selection: Mapped[Optional[str]] = mapped_column(String(200))
    value_bet_side: Mapped[Optional[str]] = mapped_column(String(10))
    value_bet_odds: Mapped[Optional[float]] = mapped_column(Float)

    state: Mapped[str] = mapped_column(String(30), nullable=False, default="PENDING")
    actual_result: Mapped[Optional[str]] = mapped_column(String(50))
    actual_score: Mapped[Optional[str]] = mapped_column(String(20))
    value_bet_outcome: Mapped[Optional[str]] = mapped_column(String(10))
    value_bet_profit: Mapped[Optional[float]] = mapped_column(Float)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    attempt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_error: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
