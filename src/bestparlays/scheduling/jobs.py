"""Scheduling entry points."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict

from bestparlays.config import GenerationConfig, configure_logging, get_settings
from bestparlays.data.repository import SqlMarketLegRepository
from bestparlays.db.database import init_db
from bestparlays.db.store import SqlParlayStore
from bestparlays.parlays.engine import generate_best_parlays
from bestparlays.parlays.persistence import MarketLegRepository, ParlayStore
from bestparlays.parlays.types import as_utc

logger = logging.getLogger(__name__)


@dataclass
class JobState:
    """Per-day run counter owned by the caller; reset when the date changes."""

    run_date: date | None = None
    runs: int = 0

    def reset_if_new_day(self, today: date) -> None:
        if self.run_date != today:
            self.run_date = today
            self.runs = 0


def run_scheduled_generation(
    state: JobState,
    config: GenerationConfig | None = None,
    *,
    repository: MarketLegRepository | None = None,
    store: ParlayStore | None = None,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Run one cron-triggered generation unless today's run budget is spent."""

    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    state.reset_if_new_day(as_utc(now).date())
    if state.runs >= settings.max_scheduled_runs_per_day:
        logger.info("Daily generation limit of %d reached", settings.max_scheduled_runs_per_day)
        return {"status": "skipped", "reason": "daily_limit", "runs": state.runs}

    result = generate_best_parlays(
        config,
        repository=repository or SqlMarketLegRepository(),
        store=store or SqlParlayStore(),
        now=now,
        settings=settings,
    )
    state.runs += 1
    return {"status": "ok", "runs": state.runs, **result.to_dict()}


def main() -> None:  # pragma: no cover - CLI convenience
    parser = argparse.ArgumentParser(description="Generate and store the best parlays.")
    parser.add_argument("--parlay-type", choices=["single", "multi", "both"], default=None)
    parser.add_argument("--max-results", type=int, default=None)
    args = parser.parse_args()

    configure_logging()
    init_db()
    overrides = {
        key: value
        for key, value in {"parlay_type": args.parlay_type, "max_results": args.max_results}.items()
        if value is not None
    }
    summary = run_scheduled_generation(JobState(), GenerationConfig.from_settings(**overrides))
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
