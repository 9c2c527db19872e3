"""Best parlay generation: fetch legs, combine, score, rank and persist."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from bestparlays.config import GenerationConfig, Settings, get_settings
from bestparlays.parlays.combiner import MIN_LEGS, combine, eligible_legs
from bestparlays.parlays.correlation import CorrelationClassifier
from bestparlays.parlays.errors import (
    DegenerateProbability,
    InvalidCandidate,
    PersistenceConflict,
    RepositoryUnavailable,
)
from bestparlays.parlays.persistence import (
    MarketLegRepository,
    ParlayStore,
    build_persisted_parlay,
)
from bestparlays.parlays.ranker import rank_and_filter
from bestparlays.parlays.scorer import score
from bestparlays.parlays.types import MarketLeg, ParlayCandidate

logger = logging.getLogger(__name__)

LEG_COUNTS = (2, 3, 4, 5)


def _empty_leg_counts() -> dict[int, int]:
    return {count: 0 for count in LEG_COUNTS}


@dataclass
class GenerationResult:
    """Batch summary of one generation run."""

    parlays_generated: int = 0
    parlays_created: int = 0
    parlays_skipped: int = 0
    errors: int = 0
    multi_game: int = 0
    single_game: int = 0
    by_leg_count: dict[int, int] = field(default_factory=_empty_leg_counts)
    ineligible_legs: int = 0
    parlays: list[ParlayCandidate] = field(default_factory=list)
    created_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "parlaysGenerated": self.parlays_generated,
            "parlaysCreated": self.parlays_created,
            "parlaysSkipped": self.parlays_skipped,
            "errors": self.errors,
            "summary": {
                "multiGame": self.multi_game,
                "singleGame": self.single_game,
                "byLegCount": dict(self.by_leg_count),
            },
        }


def _fetch_legs(repository: MarketLegRepository, now: datetime) -> list[MarketLeg]:
    try:
        return list(repository.fetch_upcoming(now))
    except RepositoryUnavailable as exc:
        exc.result = GenerationResult()
        raise
    except Exception as exc:
        raise RepositoryUnavailable(
            f"market leg repository failed: {exc}", result=GenerationResult()
        ) from exc


def _score_all(
    candidates: list[ParlayCandidate],
    classifier: CorrelationClassifier | None,
    result: GenerationResult,
    now: datetime,
) -> list[ParlayCandidate]:
    scored: list[ParlayCandidate] = []
    for candidate in candidates:
        try:
            scored.append(score(candidate, classifier, now=now))
        except InvalidCandidate as exc:
            result.errors += 1
            logger.info("Rejected invalid candidate: %s", exc)
        except DegenerateProbability as exc:
            result.parlays_skipped += 1
            logger.debug("Skipped degenerate candidate: %s", exc)
    return scored


def _persist(
    ranked: list[ParlayCandidate],
    store: ParlayStore,
    now: datetime,
    result: GenerationResult,
) -> None:
    for candidate in ranked:
        record = build_persisted_parlay(candidate, now)
        try:
            existing = store.find_active(record.dedup_key)
            if existing is not None:
                raise PersistenceConflict(record.dedup_key, existing)
            store.save(record)
        except PersistenceConflict as exc:
            result.parlays_skipped += 1
            logger.debug("Skipping duplicate parlay %s", exc.existing_id or exc.dedup_key)
            continue
        except Exception:
            result.errors += 1
            logger.exception("Failed to persist parlay %s", record.dedup_key)
            continue
        result.parlays_created += 1
        result.created_ids.append(record.parlay_id)


def generate_best_parlays(
    config: GenerationConfig | None = None,
    *,
    repository: MarketLegRepository,
    store: ParlayStore,
    now: datetime | None = None,
    classifier: CorrelationClassifier | None = None,
    settings: Settings | None = None,
) -> GenerationResult:
    """Run one generation batch and return its summary.

    Only a repository failure aborts the run (``RepositoryUnavailable``);
    every per-leg and per-candidate problem is tallied in the result.
    """

    settings = settings or get_settings()
    config = config or GenerationConfig.from_settings(settings)
    now = now or datetime.now(timezone.utc)
    result = GenerationResult()

    snapshot = _fetch_legs(repository, now)
    pool, excluded = eligible_legs(snapshot, now)
    result.ineligible_legs = len(excluded)
    if config.min_leg_edge > 0:
        pool = [leg for leg in pool if leg.effective_edge * 100 >= config.min_leg_edge]
    logger.info(
        "Generating parlays from %d eligible legs (%d excluded, %d fetched)",
        len(pool),
        len(excluded),
        len(snapshot),
    )
    if len(pool) < MIN_LEGS:
        return result

    candidates = combine(
        pool,
        MIN_LEGS,
        config.max_leg_count,
        pool_limit=settings.combination_pool_limit,
        max_candidates_per_leg_count=settings.max_candidates_per_leg_count,
    )
    scored = _score_all(candidates, classifier, result, now)
    ranked = rank_and_filter(scored, config)

    result.parlays = ranked
    result.parlays_generated = len(ranked)
    for candidate in ranked:
        if candidate.is_multi_game:
            result.multi_game += 1
        else:
            result.single_game += 1
        if candidate.leg_count in result.by_leg_count:
            result.by_leg_count[candidate.leg_count] += 1

    _persist(ranked, store, now, result)
    logger.info(
        "Best parlay generation complete: generated=%d created=%d skipped=%d errors=%d",
        result.parlays_generated,
        result.parlays_created,
        result.parlays_skipped,
        result.errors,
    )
    return result
