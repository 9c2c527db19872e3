"""Quality indicators derived from a scored parlay."""

from __future__ import annotations

from typing import Literal

ConfidenceTier = Literal["low", "medium", "high"]
RiskLevel = Literal["low", "medium", "high", "very_high"]
QualityTier = Literal["excellent", "good", "fair", "poor"]

TRADABLE_MIN_EDGE = 5.0
TRADABLE_MIN_PROB = 0.05

_CONFIDENCE_WEIGHTS = {"high": 1.0, "medium": 0.7, "low": 0.4}


def confidence_tier(avg_agreement: float, edge_percent: float) -> ConfidenceTier:
    """Coarse label from mean model agreement and edge, high checked first."""

    if avg_agreement >= 0.80 and edge_percent >= 15:
        return "high"
    if avg_agreement >= 0.70 and edge_percent >= 10:
        return "medium"
    return "low"


def is_tradable(edge_percent: float, adjusted_probability: float) -> bool:
    return edge_percent >= TRADABLE_MIN_EDGE and adjusted_probability >= TRADABLE_MIN_PROB


def risk_level(adjusted_probability: float) -> RiskLevel:
    if adjusted_probability >= 0.20:
        return "low"
    if adjusted_probability >= 0.10:
        return "medium"
    if adjusted_probability >= 0.05:
        return "high"
    return "very_high"


def quality_score(edge_percent: float, adjusted_probability: float, tier: str) -> float:
    """Composite 0-100 score: edge 40%, probability 30%, confidence 30%."""

    edge_score = min(max(edge_percent, 0.0), 50.0) * 2
    prob_score = min(max(adjusted_probability * 100, 0.0), 100.0)
    confidence_score = _CONFIDENCE_WEIGHTS.get((tier or "").lower(), 0.4) * 100
    return edge_score * 0.4 + prob_score * 0.3 + confidence_score * 0.3


def quality_tier(score: float) -> QualityTier:
    if score >= 70:
        return "excellent"
    if score >= 50:
        return "good"
    if score >= 30:
        return "fair"
    return "poor"
