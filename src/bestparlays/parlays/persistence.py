"""Boundary between the engine and its external leg source and parlay store."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

from bestparlays.parlays.errors import PersistenceConflict
from bestparlays.parlays.types import MarketLeg, ParlayCandidate, as_utc

ACTIVE = "active"
SETTLED = "settled"
VOID = "void"


class MarketLegRepository(Protocol):
    def fetch_upcoming(self, now: datetime) -> list[MarketLeg]:
        """Return leg snapshots for upcoming matches."""


class ParlayStore(Protocol):
    def find_active(self, dedup_key: str) -> str | None:
        """Return the id of an active parlay with this leg set, if any."""

    def save(self, parlay: PersistedParlay) -> None:
        """Write a parlay and its legs; raise PersistenceConflict on a duplicate."""


def _line_label(line: float | None) -> str:
    return "" if line is None else f"{line:g}".replace(".", "_")


def outcome_label(leg: MarketLeg) -> str:
    """Short outcome code stored with each persisted leg."""

    market = (leg.market_type or "").upper()
    subtype = (leg.market_subtype or "").upper()
    if market == "1X2":
        return {"HOME": "H", "AWAY": "A", "DRAW": "D"}.get(subtype, subtype)
    if market == "TOTALS" and leg.line is not None:
        return f"{subtype}_{_line_label(leg.line)}"
    if market == "BTTS":
        return f"BTTS_{subtype}"
    if market == "DNB":
        return {"HOME": "DNB_H", "AWAY": "DNB_A"}.get(subtype, f"DNB_{subtype}")
    parts = [market, subtype, _line_label(leg.line)]
    return "_".join(part for part in parts if part)


def dedup_key(legs: Sequence[MarketLeg]) -> str:
    """Order-independent signature of a leg set."""

    parts = sorted(
        ":".join(
            [
                leg.match_id,
                leg.market_type,
                leg.market_subtype or "",
                "" if leg.line is None else f"{leg.line:g}",
                outcome_label(leg),
            ]
        )
        for leg in legs
    )
    return "|".join(parts)


def kickoff_window(earliest: datetime, now: datetime) -> str:
    today = as_utc(now).date()
    kickoff_day = as_utc(earliest).date()
    if kickoff_day <= today:
        return "today"
    if kickoff_day == today + timedelta(days=1):
        return "tomorrow"
    return "this_week"


def league_group(legs: Sequence[MarketLeg]) -> str | None:
    leagues = list(dict.fromkeys(leg.league for leg in legs if leg.league))
    if not leagues:
        return None
    if len(leagues) == 1:
        return leagues[0]
    return f"{len(leagues)} leagues"


@dataclass(frozen=True)
class PersistedLeg:
    match_id: str
    outcome: str
    home_team: str
    away_team: str
    model_prob: float
    decimal_odds: float | None
    edge: float
    leg_order: int
    market_type: str
    market_subtype: str | None = None
    line: float | None = None
    market_id: str | None = None


@dataclass(frozen=True)
class PersistedParlay:
    parlay_id: str
    status: str
    dedup_key: str
    leg_count: int
    combined_probability: float
    correlation_penalty: float
    adjusted_probability: float
    implied_odds: float
    edge_percent: float
    confidence_tier: str
    parlay_type: str
    is_multi_game: bool
    earliest_kickoff: datetime
    latest_kickoff: datetime
    kickoff_window: str
    league_group: str | None
    legs: tuple[PersistedLeg, ...] = field(default_factory=tuple)


def build_persisted_parlay(candidate: ParlayCandidate, now: datetime) -> PersistedParlay:
    """Shape a scored candidate into the record handed to the store."""

    if not candidate.is_scored:
        raise ValueError("only scored candidates can be persisted")
    legs = tuple(
        PersistedLeg(
            match_id=leg.match_id,
            outcome=outcome_label(leg),
            home_team=leg.home_team,
            away_team=leg.away_team,
            model_prob=leg.consensus_probability,
            decimal_odds=leg.decimal_odds,
            edge=leg.effective_edge,
            leg_order=order,
            market_type=leg.market_type,
            market_subtype=leg.market_subtype,
            line=leg.line,
            market_id=leg.market_id,
        )
        for order, leg in enumerate(candidate.legs, start=1)
    )
    return PersistedParlay(
        parlay_id=str(uuid.uuid4()),
        status=ACTIVE,
        dedup_key=dedup_key(candidate.legs),
        leg_count=candidate.leg_count,
        combined_probability=candidate.combined_probability,
        correlation_penalty=candidate.correlation_penalty,
        adjusted_probability=candidate.adjusted_probability,
        implied_odds=candidate.implied_odds,
        edge_percent=candidate.edge_percent,
        confidence_tier=candidate.confidence_tier,
        parlay_type=candidate.parlay_type,
        is_multi_game=candidate.is_multi_game,
        earliest_kickoff=candidate.earliest_kickoff,
        latest_kickoff=candidate.latest_kickoff,
        kickoff_window=kickoff_window(candidate.earliest_kickoff, now),
        league_group=league_group(candidate.legs),
        legs=legs,
    )


class InMemoryParlayStore:
    """Dict-backed store used for dry runs and tests."""

    def __init__(self) -> None:
        self.parlays: dict[str, PersistedParlay] = {}

    def find_active(self, dedup_key: str) -> str | None:
        for parlay in self.parlays.values():
            if parlay.status == ACTIVE and parlay.dedup_key == dedup_key:
                return parlay.parlay_id
        return None

    def save(self, parlay: PersistedParlay) -> None:
        existing = self.find_active(parlay.dedup_key)
        if existing is not None:
            raise PersistenceConflict(parlay.dedup_key, existing)
        self.parlays[parlay.parlay_id] = parlay

    def active(self) -> list[PersistedParlay]:
        return [p for p in self.parlays.values() if p.status == ACTIVE]
