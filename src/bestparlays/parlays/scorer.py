"""Parlay scoring: joint probability, correlation penalty, edge and tier."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from statistics import fmean

from bestparlays.parlays import quality
from bestparlays.parlays.combiner import MIN_LEGS
from bestparlays.parlays.correlation import CorrelationClassifier, correlation_penalty
from bestparlays.parlays.errors import DegenerateProbability, InvalidCandidate
from bestparlays.parlays.types import MarketLeg, ParlayCandidate

_default_classifier = CorrelationClassifier()


def validate_candidate(candidate: ParlayCandidate, now: datetime | None = None) -> None:
    if candidate.leg_count < MIN_LEGS:
        raise InvalidCandidate(f"parlay needs at least {MIN_LEGS} legs, got {candidate.leg_count}")
    if len(set(candidate.leg_keys)) != candidate.leg_count:
        raise InvalidCandidate("parlay contains duplicate leg definitions")
    for leg in candidate.legs:
        reason = leg.ineligibility_reason(now)
        if reason is not None:
            raise InvalidCandidate(f"leg {leg.leg_key} is ineligible: {reason}")


def parlay_probability(legs: tuple[MarketLeg, ...]) -> float:
    return math.prod(leg.consensus_probability for leg in legs)


def edge_percent(legs: tuple[MarketLeg, ...]) -> float:
    """Mean leg edge in percentage points.

    This is the simple per-leg average rather than a joint parlay edge;
    legs without market odds contribute zero.
    """

    return fmean(leg.effective_edge * 100 for leg in legs)


def score(
    candidate: ParlayCandidate,
    classifier: CorrelationClassifier | None = None,
    now: datetime | None = None,
) -> ParlayCandidate:
    """Return a new candidate with every metric populated.

    When ``now`` is given, legs that have already kicked off are rejected.
    """

    validate_candidate(candidate, now)
    classifier = classifier or _default_classifier

    combined = parlay_probability(candidate.legs)
    has_correlation = classifier.has_correlated_pair(candidate.legs)
    penalty = correlation_penalty(candidate.is_multi_game, has_correlation)
    adjusted = combined * penalty
    if adjusted <= 0:
        raise DegenerateProbability(f"adjusted probability {adjusted} for {candidate.leg_keys}")

    edge = edge_percent(candidate.legs)
    avg_agreement = fmean(leg.model_agreement for leg in candidate.legs)
    return replace(
        candidate,
        combined_probability=combined,
        correlation_penalty=penalty,
        has_correlation=has_correlation,
        adjusted_probability=adjusted,
        implied_odds=1 / adjusted,
        edge_percent=edge,
        avg_model_agreement=avg_agreement,
        confidence_tier=quality.confidence_tier(avg_agreement, edge),
    )
