"""ORM models for matches, market legs and generated parlays."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative class."""


class Match(Base):
    """Fixture metadata shared by all markets of a match."""

    __tablename__ = "market_matches"

    match_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    home_team: Mapped[str] = mapped_column(String(128), nullable=False)
    away_team: Mapped[str] = mapped_column(String(128), nullable=False)
    league: Mapped[str | None] = mapped_column(String(128))
    kickoff_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="UPCOMING")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    markets: Mapped[list[MarketData]] = relationship(
        back_populates="match",
        cascade="all, delete-orphan",
    )


class MarketData(Base):
    """Model consensus for one outcome of one market."""

    __tablename__ = "additional_market_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    match_id: Mapped[str] = mapped_column(ForeignKey("market_matches.match_id"), nullable=False)
    market_type: Mapped[str] = mapped_column(String(32), nullable=False)
    market_subtype: Mapped[str | None] = mapped_column(String(32))
    line: Mapped[float | None] = mapped_column(Float)
    consensus_prob: Mapped[float | None] = mapped_column(Float)
    model_agreement: Mapped[float | None] = mapped_column(Float)
    edge_consensus: Mapped[float | None] = mapped_column(Float)
    decimal_odds: Mapped[float | None] = mapped_column(Float)
    implied_prob: Mapped[float | None] = mapped_column(Float)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    match: Mapped[Match] = relationship(back_populates="markets")


class Parlay(Base):
    """Accepted parlay with its scored metrics."""

    __tablename__ = "parlay_consensus"
    __table_args__ = (
        Index(
            "uq_parlay_active_dedup_key",
            "dedup_key",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    parlay_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    dedup_key: Mapped[str] = mapped_column(String(2048), nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="active")
    leg_count: Mapped[int] = mapped_column(Integer, nullable=False)
    combined_prob: Mapped[float] = mapped_column(Float, nullable=False)
    correlation_penalty: Mapped[float] = mapped_column(Float, nullable=False)
    adjusted_prob: Mapped[float] = mapped_column(Float, nullable=False)
    implied_odds: Mapped[float] = mapped_column(Float, nullable=False)
    edge_pct: Mapped[float] = mapped_column(Float, nullable=False)
    confidence_tier: Mapped[str] = mapped_column(String(16), nullable=False)
    parlay_type: Mapped[str] = mapped_column(String(32), nullable=False)
    league_group: Mapped[str | None] = mapped_column(String(128))
    earliest_kickoff: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    latest_kickoff: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    kickoff_window: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    legs: Mapped[list[ParlayLeg]] = relationship(
        back_populates="parlay",
        cascade="all, delete-orphan",
        order_by="ParlayLeg.leg_order",
    )


class ParlayLeg(Base):
    """One leg of a persisted parlay."""

    __tablename__ = "parlay_legs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    parlay_id: Mapped[int] = mapped_column(ForeignKey("parlay_consensus.id"), nullable=False)
    match_id: Mapped[str] = mapped_column(String(64), nullable=False)
    outcome: Mapped[str] = mapped_column(String(32), nullable=False)
    home_team: Mapped[str] = mapped_column(String(128), nullable=False)
    away_team: Mapped[str] = mapped_column(String(128), nullable=False)
    model_prob: Mapped[float] = mapped_column(Float, nullable=False)
    decimal_odds: Mapped[float | None] = mapped_column(Float)
    edge: Mapped[float] = mapped_column(Float, nullable=False)
    leg_order: Mapped[int] = mapped_column(Integer, default=1)
    additional_market_id: Mapped[str | None] = mapped_column(String(64))

    parlay: Mapped[Parlay] = relationship(back_populates="legs")
