"""Dataclasses for market legs and parlay modeling."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional, Tuple

from bestparlays.parlays import quality

UPCOMING = "upcoming"

SINGLE_GAME = "single_game"
CROSS_LEAGUE = "cross_league"
ParlayType = Literal["single_game", "cross_league"]

LegKey = Tuple[str, str, Optional[str], Optional[float]]


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so kickoffs compare consistently."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class MarketLeg:
    """A single outcome of a single match with its model estimates."""

    match_id: str
    market_type: str
    market_subtype: str | None
    consensus_probability: float
    model_agreement: float
    kickoff_time: datetime
    match_status: str = UPCOMING
    line: float | None = None
    decimal_odds: float | None = None
    edge_vs_market: float | None = None
    market_id: str | None = None
    home_team: str = ""
    away_team: str = ""
    league: str | None = None

    @property
    def leg_key(self) -> LegKey:
        return (self.match_id, self.market_type, self.market_subtype, self.line)

    @property
    def effective_edge(self) -> float:
        # Without market odds there is no edge to speak of.
        if self.decimal_odds is None or self.edge_vs_market is None:
            return 0.0
        return self.edge_vs_market

    def ineligibility_reason(self, now: datetime | None = None) -> str | None:
        """Return why the leg cannot be combined, or None when it can."""

        if (self.match_status or "").lower() != UPCOMING:
            return f"match status is {self.match_status!r}"
        if not 0.0 < self.consensus_probability <= 1.0:
            return f"probability {self.consensus_probability} outside (0, 1]"
        if now is not None and as_utc(self.kickoff_time) <= as_utc(now):
            return "kickoff is in the past"
        return None

    def is_eligible(self, now: datetime | None = None) -> bool:
        return self.ineligibility_reason(now) is None


@dataclass(frozen=True)
class ParlayCandidate:
    """A leg combination, unscored until the scorer fills the metrics."""

    legs: tuple[MarketLeg, ...]
    combined_probability: float | None = None
    correlation_penalty: float | None = None
    has_correlation: bool = False
    adjusted_probability: float | None = None
    implied_odds: float | None = None
    edge_percent: float | None = None
    avg_model_agreement: float | None = None
    confidence_tier: quality.ConfidenceTier | None = None

    @classmethod
    def from_legs(cls, legs) -> ParlayCandidate:
        return cls(legs=tuple(legs))

    @property
    def leg_count(self) -> int:
        return len(self.legs)

    @property
    def match_ids(self) -> list[str]:
        return list(dict.fromkeys(leg.match_id for leg in self.legs))

    @property
    def is_multi_game(self) -> bool:
        return len(self.match_ids) > 1

    @property
    def parlay_type(self) -> ParlayType:
        return CROSS_LEAGUE if self.is_multi_game else SINGLE_GAME

    @property
    def leg_keys(self) -> list[LegKey]:
        return [leg.leg_key for leg in self.legs]

    @property
    def earliest_kickoff(self) -> datetime:
        return min(as_utc(leg.kickoff_time) for leg in self.legs)

    @property
    def latest_kickoff(self) -> datetime:
        return max(as_utc(leg.kickoff_time) for leg in self.legs)

    @property
    def is_scored(self) -> bool:
        return self.adjusted_probability is not None and self.edge_percent is not None

    def _scored(self) -> tuple[float, float]:
        if not self.is_scored:
            raise ValueError("candidate has not been scored")
        return self.edge_percent, self.adjusted_probability  # type: ignore[return-value]

    @property
    def is_tradable(self) -> bool:
        edge, prob = self._scored()
        return quality.is_tradable(edge, prob)

    @property
    def risk_level(self) -> quality.RiskLevel:
        _, prob = self._scored()
        return quality.risk_level(prob)

    @property
    def quality_score(self) -> float:
        edge, prob = self._scored()
        return quality.quality_score(edge, prob, self.confidence_tier or "low")

    @property
    def quality_tier(self) -> quality.QualityTier:
        return quality.quality_tier(self.quality_score)
