"""Pydantic schemas for the best parlays API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from bestparlays.config import GenerationConfig


class GenerateBestRequest(BaseModel):
    config: GenerationConfig | None = None


class GenerationSummary(BaseModel):
    multiGame: int
    singleGame: int
    byLegCount: dict[int, int]


class GenerateBestResponse(BaseModel):
    success: bool = True
    message: str
    parlaysGenerated: int
    parlaysCreated: int
    parlaysSkipped: int
    errors: int
    summary: GenerationSummary


class ParlayLeg(BaseModel):
    match_id: str
    outcome: str
    home_team: str
    away_team: str
    model_prob: float
    decimal_odds: float | None = None
    edge: float
    leg_order: int


class ParlayResponse(BaseModel):
    parlay_id: str
    status: str
    leg_count: int
    combined_prob: float
    correlation_penalty: float
    adjusted_prob: float
    implied_odds: float
    edge_pct: float
    confidence_tier: str
    parlay_type: str
    league_group: str | None = None
    earliest_kickoff: datetime
    latest_kickoff: datetime
    kickoff_window: str
    is_tradable: bool
    risk_level: str
    legs: list[ParlayLeg] = Field(default_factory=list)
