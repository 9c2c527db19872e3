"""FastAPI trigger and read surface for the best parlays engine."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status

from bestparlays.api.schemas import (
    GenerateBestRequest,
    GenerateBestResponse,
    ParlayLeg,
    ParlayResponse,
)
from bestparlays.config import GenerationConfig, get_api_access_key, get_settings
from bestparlays.data.repository import SqlMarketLegRepository
from bestparlays.db.models import Parlay as ParlayModel
from bestparlays.db.store import SqlParlayStore
from bestparlays.parlays import quality
from bestparlays.parlays.engine import generate_best_parlays
from bestparlays.parlays.errors import RepositoryUnavailable
from bestparlays.parlays.persistence import MarketLegRepository

app = FastAPI(
    title="Best Parlays API",
    version="0.1.0",
    description="Generates, scores and lists multi-leg parlays.",
)


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    expected = get_api_access_key()
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def get_repository() -> MarketLegRepository:
    return SqlMarketLegRepository()


def get_store() -> SqlParlayStore:
    return SqlParlayStore()


APIKeyDep = Annotated[None, Depends(require_api_key)]
RepositoryDep = Annotated[MarketLegRepository, Depends(get_repository)]
StoreDep = Annotated[SqlParlayStore, Depends(get_store)]
LimitQuery = Annotated[int, Query(ge=1, le=100)]


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/parlays/generate-best", response_model=GenerateBestResponse)
def generate_best(
    _: APIKeyDep,
    repository: RepositoryDep,
    store: StoreDep,
    payload: GenerateBestRequest | None = None,
) -> GenerateBestResponse:
    config = (payload.config if payload else None) or GenerationConfig.from_settings(get_settings())
    try:
        result = generate_best_parlays(config, repository=repository, store=store)
    except RepositoryUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Market data unavailable: {exc}",
        ) from exc
    message = (
        f"Generated {result.parlays_generated} parlays, "
        f"created {result.parlays_created}, skipped {result.parlays_skipped}"
    )
    return GenerateBestResponse(message=message, **result.to_dict())


def _parlay_to_response(row: ParlayModel) -> ParlayResponse:
    return ParlayResponse(
        parlay_id=row.parlay_id,
        status=row.status,
        leg_count=row.leg_count,
        combined_prob=row.combined_prob,
        correlation_penalty=row.correlation_penalty,
        adjusted_prob=row.adjusted_prob,
        implied_odds=row.implied_odds,
        edge_pct=row.edge_pct,
        confidence_tier=row.confidence_tier,
        parlay_type=row.parlay_type,
        league_group=row.league_group,
        earliest_kickoff=row.earliest_kickoff,
        latest_kickoff=row.latest_kickoff,
        kickoff_window=row.kickoff_window,
        is_tradable=quality.is_tradable(row.edge_pct, row.adjusted_prob),
        risk_level=quality.risk_level(row.adjusted_prob),
        legs=[
            ParlayLeg(
                match_id=leg.match_id,
                outcome=leg.outcome,
                home_team=leg.home_team,
                away_team=leg.away_team,
                model_prob=leg.model_prob,
                decimal_odds=leg.decimal_odds,
                edge=leg.edge,
                leg_order=leg.leg_order,
            )
            for leg in row.legs
        ],
    )


@app.get("/parlays", response_model=list[ParlayResponse])
def list_parlays(_: APIKeyDep, store: StoreDep, limit: LimitQuery = 20) -> list[ParlayResponse]:
    return [_parlay_to_response(row) for row in store.list_active(limit)]
