"""SQL-backed parlay store."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload, sessionmaker

from bestparlays.db.database import SessionLocal, get_session
from bestparlays.db.models import Parlay as ParlayModel
from bestparlays.db.models import ParlayLeg as ParlayLegModel
from bestparlays.parlays.errors import PersistenceConflict
from bestparlays.parlays.persistence import ACTIVE, PersistedParlay


class SqlParlayStore:
    """Writes accepted parlays; the active dedup index backs the pre-write check."""

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self.session_factory = session_factory

    def find_active(self, dedup_key: str) -> str | None:
        with get_session(self.session_factory) as session:
            stmt = select(ParlayModel.parlay_id).where(
                ParlayModel.dedup_key == dedup_key,
                ParlayModel.status == ACTIVE,
            )
            return session.scalars(stmt).first()

    def save(self, parlay: PersistedParlay) -> None:
        try:
            with get_session(self.session_factory) as session:
                row = ParlayModel(
                    parlay_id=parlay.parlay_id,
                    dedup_key=parlay.dedup_key,
                    status=parlay.status,
                    leg_count=parlay.leg_count,
                    combined_prob=parlay.combined_probability,
                    correlation_penalty=parlay.correlation_penalty,
                    adjusted_prob=parlay.adjusted_probability,
                    implied_odds=parlay.implied_odds,
                    edge_pct=parlay.edge_percent,
                    confidence_tier=parlay.confidence_tier,
                    parlay_type=parlay.parlay_type,
                    league_group=parlay.league_group,
                    earliest_kickoff=parlay.earliest_kickoff,
                    latest_kickoff=parlay.latest_kickoff,
                    kickoff_window=parlay.kickoff_window,
                )
                row.legs = [
                    ParlayLegModel(
                        match_id=leg.match_id,
                        outcome=leg.outcome,
                        home_team=leg.home_team,
                        away_team=leg.away_team,
                        model_prob=leg.model_prob,
                        decimal_odds=leg.decimal_odds,
                        edge=leg.edge,
                        leg_order=leg.leg_order,
                        additional_market_id=leg.market_id,
                    )
                    for leg in parlay.legs
                ]
                session.add(row)
        except IntegrityError as exc:
            raise PersistenceConflict(parlay.dedup_key) from exc

    def list_active(self, limit: int = 20) -> list[ParlayModel]:
        with get_session(self.session_factory) as session:
            stmt = (
                select(ParlayModel)
                .options(selectinload(ParlayModel.legs))
                .where(ParlayModel.status == ACTIVE)
                .order_by(ParlayModel.created_at.desc(), ParlayModel.id.desc())
                .limit(limit)
            )
            return list(session.scalars(stmt))
