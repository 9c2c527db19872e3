"""Pydantic schemas validating market rows at the repository boundary."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bestparlays.parlays.types import MarketLeg


class MarketLegSchema(BaseModel):
    """One market outcome as read from storage, before it becomes a MarketLeg."""

    model_config = ConfigDict(str_strip_whitespace=True)

    market_id: str | None = None
    match_id: str = Field(min_length=1)
    market_type: str = Field(min_length=1)
    market_subtype: str | None = None
    line: float | None = None
    consensus_probability: float = Field(gt=0.0, le=1.0)
    model_agreement: float = Field(default=0.0, ge=0.0, le=1.0)
    decimal_odds: float | None = Field(default=None, ge=1.0)
    edge_vs_market: float | None = None
    kickoff_time: datetime
    match_status: str
    home_team: str = ""
    away_team: str = ""
    league: str | None = None

    @field_validator("market_type", "market_subtype")
    @classmethod
    def _upper(cls, value: str | None) -> str | None:
        return value.upper() if value else value

    @field_validator("match_status")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.lower()

    def to_leg(self) -> MarketLeg:
        return MarketLeg(**self.model_dump())
