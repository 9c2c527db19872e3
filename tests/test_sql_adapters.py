"""SQL repository and store tests against in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bestparlays.config import GenerationConfig
from bestparlays.data.repository import SqlMarketLegRepository
from bestparlays.db.database import get_session, init_db
from bestparlays.db.models import Match, MarketData, Parlay
from bestparlays.db.store import SqlParlayStore
from bestparlays.parlays import persistence, scorer
from bestparlays.parlays.engine import generate_best_parlays
from bestparlays.parlays.errors import PersistenceConflict, RepositoryUnavailable
from bestparlays.parlays.types import ParlayCandidate

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    with get_session(factory) as session:
        session.add_all(
            [
                Match(
                    match_id="M1",
                    home_team="Arsenal",
                    away_team="Chelsea",
                    league="Premier League",
                    kickoff_date=NOW + timedelta(hours=5),
                    status="UPCOMING",
                ),
                Match(
                    match_id="M2",
                    home_team="Roma",
                    away_team="Lazio",
                    league="Serie A",
                    kickoff_date=NOW + timedelta(days=1),
                    status="UPCOMING",
                ),
                Match(
                    match_id="M3",
                    home_team="Ajax",
                    away_team="PSV",
                    league="Eredivisie",
                    kickoff_date=NOW - timedelta(hours=1),
                    status="FINISHED",
                ),
            ]
        )
        session.add_all(
            [
                MarketData(match_id="M1", market_type="1X2", market_subtype="HOME", consensus_prob=0.62,
                           model_agreement=0.82, edge_consensus=0.11, decimal_odds=1.95),
                MarketData(match_id="M1", market_type="TOTALS", market_subtype="OVER", line=2.5,
                           consensus_prob=0.58, model_agreement=0.78, edge_consensus=0.09, decimal_odds=2.05),
                MarketData(match_id="M2", market_type="BTTS", market_subtype="YES", consensus_prob=0.57,
                           model_agreement=0.74, edge_consensus=0.07, decimal_odds=2.10),
                # Missing probability: excluded at the boundary.
                MarketData(match_id="M2", market_type="1X2", market_subtype="AWAY", consensus_prob=None,
                           model_agreement=0.7),
                MarketData(match_id="M3", market_type="1X2", market_subtype="HOME", consensus_prob=0.9,
                           model_agreement=0.9),
            ]
        )
    return factory


def test_repository_loads_valid_upcoming_legs(session_factory: sessionmaker) -> None:
    repository = SqlMarketLegRepository(session_factory, limit=50)
    legs = repository.fetch_upcoming(NOW)
    assert [leg.leg_key for leg in legs] == [
        ("M1", "1X2", "HOME", None),
        ("M1", "TOTALS", "OVER", 2.5),
        ("M2", "BTTS", "YES", None),
    ]
    assert legs[0].home_team == "Arsenal"
    assert legs[0].match_status == "upcoming"
    assert legs[0].league == "Premier League"
    assert len(repository.exclusions) == 1


def test_repository_filters_by_league(session_factory: sessionmaker) -> None:
    repository = SqlMarketLegRepository(session_factory, leagues=["Serie A"])
    assert {leg.match_id for leg in repository.fetch_upcoming(NOW)} == {"M2"}


def test_repository_wraps_database_errors() -> None:
    engine = create_engine("sqlite://", poolclass=StaticPool)
    repository = SqlMarketLegRepository(sessionmaker(bind=engine), limit=10)
    with pytest.raises(RepositoryUnavailable):
        repository.fetch_upcoming(NOW)


def test_store_round_trip_and_conflict(session_factory: sessionmaker) -> None:
    legs = SqlMarketLegRepository(session_factory).fetch_upcoming(NOW)
    scored = scorer.score(ParlayCandidate.from_legs(legs[:2]))
    store = SqlParlayStore(session_factory)

    record = persistence.build_persisted_parlay(scored, NOW)
    store.save(record)
    assert store.find_active(record.dedup_key) == record.parlay_id

    with pytest.raises(PersistenceConflict):
        store.save(persistence.build_persisted_parlay(scored, NOW))

    [saved] = store.list_active()
    assert saved.parlay_type == "single_game"
    assert saved.league_group == "Premier League"
    assert [(leg.leg_order, leg.outcome) for leg in saved.legs] == [(1, "H"), (2, "OVER_2_5")]


def test_settled_parlay_does_not_block_new_one(session_factory: sessionmaker) -> None:
    legs = SqlMarketLegRepository(session_factory).fetch_upcoming(NOW)
    scored = scorer.score(ParlayCandidate.from_legs(legs[:2]))
    store = SqlParlayStore(session_factory)
    first = persistence.build_persisted_parlay(scored, NOW)
    store.save(first)
    with get_session(session_factory) as session:
        session.query(Parlay).filter(Parlay.parlay_id == first.parlay_id).update({"status": "settled"})
    assert store.find_active(first.dedup_key) is None
    store.save(persistence.build_persisted_parlay(scored, NOW))


def test_pipeline_against_sql_adapters(session_factory: sessionmaker) -> None:
    config = GenerationConfig(min_parlay_edge=0.0, min_combined_prob=0.0, min_model_agreement=0.0)
    repository = SqlMarketLegRepository(session_factory)
    store = SqlParlayStore(session_factory)

    first = generate_best_parlays(config, repository=repository, store=store, now=NOW)
    second = generate_best_parlays(config, repository=repository, store=store, now=NOW)

    assert first.parlays_generated == 4
    assert first.parlays_created == 4
    assert second.parlays_created == 0
    assert second.parlays_skipped == 4
