"""SQL-backed market leg repository."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from bestparlays.config import get_settings
from bestparlays.data.schemas import MarketLegSchema
from bestparlays.db.database import SessionLocal, get_session
from bestparlays.db.models import Match, MarketData
from bestparlays.parlays.errors import IneligibleLeg, RepositoryUnavailable
from bestparlays.parlays.types import MarketLeg, as_utc

logger = logging.getLogger(__name__)


def _row_payload(market: MarketData, match: Match) -> dict:
    return {
        "market_id": str(market.id),
        "match_id": market.match_id,
        "market_type": market.market_type,
        "market_subtype": market.market_subtype,
        "line": market.line,
        "consensus_probability": market.consensus_prob,
        "model_agreement": market.model_agreement,
        "decimal_odds": market.decimal_odds,
        "edge_vs_market": market.edge_consensus,
        "kickoff_time": match.kickoff_date,
        "match_status": match.status,
        "home_team": match.home_team,
        "away_team": match.away_team,
        "league": match.league,
    }


class SqlMarketLegRepository:
    """Reads the strongest upcoming market legs from the relational store."""

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        limit: int | None = None,
        leagues: Sequence[str] | None = None,
        match_ids: Sequence[str] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.limit = limit or get_settings().max_leg_pool
        self.leagues = list(leagues or [])
        self.match_ids = list(match_ids or [])
        self.exclusions: list[IneligibleLeg] = []

    def _statement(self, now: datetime):
        stmt = (
            select(MarketData, Match)
            .join(Match, MarketData.match_id == Match.match_id)
            .where(
                func.upper(Match.status) == "UPCOMING",
                Match.is_active.is_(True),
                Match.kickoff_date > as_utc(now),
            )
            .order_by(
                MarketData.consensus_prob.desc(),
                MarketData.model_agreement.desc(),
                MarketData.edge_consensus.desc(),
                MarketData.id.asc(),
            )
            .limit(self.limit)
        )
        if self.leagues:
            stmt = stmt.where(Match.league.in_(self.leagues))
        if self.match_ids:
            stmt = stmt.where(Match.match_id.in_(self.match_ids))
        return stmt

    def fetch_upcoming(self, now: datetime) -> list[MarketLeg]:
        """Load upcoming legs; rows that fail validation are excluded, not raised."""

        self.exclusions = []
        try:
            with get_session(self.session_factory) as session:
                rows = [_row_payload(market, match) for market, match in session.execute(self._statement(now))]
        except SQLAlchemyError as exc:
            raise RepositoryUnavailable(f"failed to load market legs: {exc}") from exc

        legs: list[MarketLeg] = []
        for payload in rows:
            try:
                legs.append(MarketLegSchema.model_validate(payload).to_leg())
            except ValidationError as exc:
                key = (payload["match_id"], payload["market_type"], payload["market_subtype"], payload["line"])
                self.exclusions.append(IneligibleLeg(key, f"{exc.error_count()} invalid field(s)"))
                logger.debug("Excluding malformed market row %s: %s", payload["market_id"], exc)
        if self.exclusions:
            logger.info("Excluded %d malformed market rows", len(self.exclusions))
        return legs
