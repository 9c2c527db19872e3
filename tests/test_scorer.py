"""Parlay scorer tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from bestparlays.parlays import scorer
from bestparlays.parlays.errors import InvalidCandidate
from bestparlays.parlays.types import CROSS_LEAGUE, SINGLE_GAME, MarketLeg, ParlayCandidate

KICKOFF = datetime(2026, 10, 20, 18, 0, tzinfo=timezone.utc)


def _leg(
    match_id: str,
    market_type: str = "1X2",
    subtype: str = "HOME",
    prob: float = 0.6,
    line: float | None = None,
    agreement: float = 0.75,
    edge: float | None = None,
    odds: float | None = None,
    status: str = "upcoming",
) -> MarketLeg:
    return MarketLeg(
        match_id=match_id,
        market_type=market_type,
        market_subtype=subtype,
        line=line,
        consensus_probability=prob,
        model_agreement=agreement,
        edge_vs_market=edge,
        decimal_odds=odds,
        kickoff_time=KICKOFF,
        match_status=status,
    )


def test_correlated_single_game_pair() -> None:
    candidate = ParlayCandidate.from_legs(
        [_leg("M1", prob=0.60), _leg("M1", "TOTALS", "OVER", prob=0.55, line=2.5)]
    )
    scored = scorer.score(candidate)
    assert scored.has_correlation
    assert scored.parlay_type == SINGLE_GAME
    assert not scored.is_multi_game
    assert scored.combined_probability == pytest.approx(0.33)
    assert scored.correlation_penalty == 0.80
    assert scored.adjusted_probability == pytest.approx(0.264)
    assert scored.implied_odds == pytest.approx(3.79, abs=0.01)


def test_uncorrelated_multi_game_pair() -> None:
    candidate = ParlayCandidate.from_legs([_leg("M1", prob=0.60), _leg("M2", prob=0.55)])
    scored = scorer.score(candidate)
    assert not scored.has_correlation
    assert scored.parlay_type == CROSS_LEAGUE
    assert scored.correlation_penalty == 0.92
    assert scored.adjusted_probability == pytest.approx(0.3036)


def test_high_confidence_tier() -> None:
    legs = [
        _leg("M1", agreement=0.80, edge=0.17, odds=2.1),
        _leg("M2", agreement=0.85, edge=0.18, odds=2.0),
        _leg("M3", agreement=0.90, edge=0.19, odds=1.9),
    ]
    scored = scorer.score(ParlayCandidate.from_legs(legs))
    assert scored.avg_model_agreement == pytest.approx(0.85)
    assert scored.edge_percent == pytest.approx(18.0)
    assert scored.confidence_tier == "high"


def test_medium_and_low_confidence_tiers() -> None:
    medium = [_leg("M1", agreement=0.72, edge=0.12, odds=2.0), _leg("M2", agreement=0.72, edge=0.12, odds=2.0)]
    assert scorer.score(ParlayCandidate.from_legs(medium)).confidence_tier == "medium"
    # High agreement cannot rescue a thin edge.
    low = [_leg("M1", agreement=0.95, edge=0.05, odds=2.0), _leg("M2", agreement=0.95, edge=0.05, odds=2.0)]
    assert scorer.score(ParlayCandidate.from_legs(low)).confidence_tier == "low"


def test_legs_without_odds_count_as_zero_edge() -> None:
    legs = [_leg("M1", edge=0.20, odds=2.0), _leg("M2", edge=0.20, odds=None)]
    scored = scorer.score(ParlayCandidate.from_legs(legs))
    assert scored.edge_percent == pytest.approx(10.0)


def test_quality_indicators_for_thin_edge() -> None:
    candidate = ParlayCandidate(
        legs=(_leg("M1"), _leg("M2")),
        edge_percent=4.0,
        adjusted_probability=0.08,
    )
    assert candidate.is_tradable is False
    assert candidate.risk_level == "high"


def test_single_leg_is_rejected() -> None:
    with pytest.raises(InvalidCandidate):
        scorer.score(ParlayCandidate.from_legs([_leg("M1")]))


def test_duplicate_leg_definitions_are_rejected() -> None:
    with pytest.raises(InvalidCandidate):
        scorer.score(ParlayCandidate.from_legs([_leg("M1"), _leg("M1")]))


def test_ineligible_leg_is_rejected() -> None:
    with pytest.raises(InvalidCandidate):
        scorer.score(ParlayCandidate.from_legs([_leg("M1"), _leg("M2", status="finished")]))


def test_leg_past_kickoff_is_rejected() -> None:
    candidate = ParlayCandidate.from_legs([_leg("M1"), _leg("M2")])
    with pytest.raises(InvalidCandidate, match="kickoff is in the past"):
        scorer.score(candidate, now=KICKOFF + timedelta(minutes=1))
    assert scorer.score(candidate, now=KICKOFF - timedelta(hours=1)).is_scored


def test_scoring_does_not_mutate_input() -> None:
    candidate = ParlayCandidate.from_legs([_leg("M1"), _leg("M2")])
    scored = scorer.score(candidate)
    assert candidate.adjusted_probability is None
    assert scored is not candidate
    assert scored.legs == candidate.legs


def test_probability_bounds() -> None:
    legs = [_leg(f"M{i}", prob=p) for i, p in enumerate([0.99, 0.51, 0.7, 1.0, 0.05])]
    for size in range(2, 6):
        scored = scorer.score(ParlayCandidate.from_legs(legs[:size]))
        assert 0 < scored.adjusted_probability <= scored.combined_probability <= 1


def test_correlated_candidate_never_scores_higher() -> None:
    correlated = [_leg("M1", prob=0.6), _leg("M1", "BTTS", "YES", prob=0.55)]
    uncorrelated = [_leg("M1", prob=0.6), _leg("M1", "BTTS", "NO", prob=0.55)]
    a = scorer.score(ParlayCandidate.from_legs(correlated))
    b = scorer.score(ParlayCandidate.from_legs(uncorrelated))
    assert a.adjusted_probability < b.adjusted_probability


def test_kickoff_span_properties() -> None:
    early = _leg("M1")
    late = MarketLeg(
        match_id="M2",
        market_type="1X2",
        market_subtype="AWAY",
        consensus_probability=0.5,
        model_agreement=0.7,
        kickoff_time=KICKOFF + timedelta(hours=3),
    )
    candidate = ParlayCandidate.from_legs([late, early])
    assert candidate.earliest_kickoff == KICKOFF
    assert candidate.latest_kickoff == KICKOFF + timedelta(hours=3)
    assert candidate.match_ids == ["M2", "M1"]
