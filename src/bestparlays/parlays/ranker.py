"""Threshold filtering and ordering of scored parlays."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bestparlays.config import GenerationConfig
from bestparlays.parlays.types import ParlayCandidate

logger = logging.getLogger(__name__)


def _type_allowed(candidate: ParlayCandidate, parlay_type: str) -> bool:
    if parlay_type == "both":
        return True
    if parlay_type == "multi":
        return candidate.is_multi_game
    return not candidate.is_multi_game


def rejection_reason(candidate: ParlayCandidate, config: GenerationConfig) -> str | None:
    """Return the first failed threshold, or None when the candidate passes."""

    if not candidate.is_scored:
        return "unscored"
    if candidate.edge_percent < config.min_parlay_edge:
        return "edge"
    if candidate.adjusted_probability < config.min_combined_prob:
        return "probability"
    if candidate.avg_model_agreement < config.min_model_agreement:
        return "model_agreement"
    if candidate.leg_count > config.max_leg_count:
        return "leg_count"
    if not _type_allowed(candidate, config.parlay_type):
        return "parlay_type"
    return None


def ranking_key(candidate: ParlayCandidate) -> tuple:
    legs = sorted(
        (match_id, market_type, subtype or "", line if line is not None else float("-inf"))
        for match_id, market_type, subtype, line in candidate.leg_keys
    )
    return (-candidate.edge_percent, candidate.earliest_kickoff, legs)


def rank_and_filter(
    candidates: Iterable[ParlayCandidate],
    config: GenerationConfig,
) -> list[ParlayCandidate]:
    """Drop candidates failing any threshold, best edge first, soonest kickoff on ties."""

    survivors: list[ParlayCandidate] = []
    rejected: dict[str, int] = {}
    for candidate in candidates:
        reason = rejection_reason(candidate, config)
        if reason is None:
            survivors.append(candidate)
        else:
            rejected[reason] = rejected.get(reason, 0) + 1
    if rejected:
        logger.debug("Rejected candidates by threshold: %s", rejected)
    survivors.sort(key=ranking_key)
    return survivors[: config.max_results]
