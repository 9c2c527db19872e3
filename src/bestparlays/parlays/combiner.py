"""Leg pool preparation and parlay combination enumeration."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from bestparlays.parlays.errors import IneligibleLeg
from bestparlays.parlays.types import MarketLeg, ParlayCandidate

logger = logging.getLogger(__name__)

MIN_LEGS = 2
MAX_LEGS = 5

# Legs kept after ordering the pool. Every leg count gets its own candidate
# budget, so larger parlays are still produced when smaller sizes fill up.
POOL_LIMIT = 30
MAX_CANDIDATES_PER_LEG_COUNT = 5_000


def eligible_legs(
    legs: Iterable[MarketLeg],
    now: datetime | None = None,
) -> tuple[list[MarketLeg], list[IneligibleLeg]]:
    """Split a snapshot into eligible legs and the exclusions encountered.

    Repeated leg definitions are collapsed to their first occurrence so no
    subset drawn from the pool can hold the same leg twice.
    """

    eligible: list[MarketLeg] = []
    excluded: list[IneligibleLeg] = []
    seen: set = set()
    for leg in legs:
        reason = leg.ineligibility_reason(now)
        if reason is None and leg.leg_key in seen:
            reason = "duplicate leg definition"
        if reason is not None:
            excluded.append(IneligibleLeg(leg.leg_key, reason))
            logger.debug("Excluding leg %s: %s", leg.leg_key, reason)
            continue
        seen.add(leg.leg_key)
        eligible.append(leg)
    return eligible, excluded


def _sort_key(leg: MarketLeg) -> tuple:
    match_id, market_type, subtype, line = leg.leg_key
    return (
        -leg.consensus_probability,
        -leg.model_agreement,
        -leg.effective_edge,
        match_id,
        market_type,
        subtype or "",
        line if line is not None else float("-inf"),
    )


def order_leg_pool(legs: Iterable[MarketLeg]) -> list[MarketLeg]:
    """Strongest legs first; the trailing leg key makes the order total."""

    return sorted(legs, key=_sort_key)


def _has_duplicate_legs(legs: tuple[MarketLeg, ...]) -> bool:
    return len({leg.leg_key for leg in legs}) != len(legs)


def iter_combinations(
    legs: list[MarketLeg],
    min_legs: int = MIN_LEGS,
    max_legs: int = MAX_LEGS,
    per_size_limit: int | None = None,
) -> Iterator[tuple[MarketLeg, ...]]:
    for size in range(min_legs, max_legs + 1):
        produced = 0
        for combo in itertools.combinations(legs, size):
            if per_size_limit is not None and produced >= per_size_limit:
                logger.info("Candidate budget of %d reached for %d-leg parlays", per_size_limit, size)
                break
            if _has_duplicate_legs(combo):
                continue
            produced += 1
            yield combo


def combine(
    legs: Iterable[MarketLeg],
    min_legs: int = MIN_LEGS,
    max_legs: int = MAX_LEGS,
    *,
    pool_limit: int = POOL_LIMIT,
    max_candidates_per_leg_count: int = MAX_CANDIDATES_PER_LEG_COUNT,
) -> list[ParlayCandidate]:
    """Enumerate unscored candidates of ``min_legs`` to ``max_legs`` legs.

    The pool is ordered deterministically and pruned to ``pool_limit`` legs.
    Each leg count is enumerated in ``itertools.combinations`` order and
    stops after ``max_candidates_per_leg_count`` candidates, so the
    strongest legs are walked first. Single-game and multi-game subsets are
    both kept.
    """

    if min_legs < MIN_LEGS or max_legs < min_legs:
        raise ValueError(f"invalid leg range {min_legs}..{max_legs}")

    pool = order_leg_pool(legs)
    if len(pool) > pool_limit:
        logger.info("Pruning leg pool from %d to %d legs", len(pool), pool_limit)
        pool = pool[:pool_limit]

    return [
        ParlayCandidate.from_legs(combo)
        for combo in iter_combinations(pool, min_legs, max_legs, max_candidates_per_leg_count)
    ]
