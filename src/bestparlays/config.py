"""Environment-driven configuration helpers for the best parlays engine."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import AnyUrl, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ParlayTypeFilter = Literal["single", "multi", "both"]


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./bestparlays.db")
    log_level: str = Field(default="INFO")

    bestparlays_api_key: str = Field(default="", validation_alias="BESTPARLAYS_API_KEY")

    # Generation defaults, percentages are expressed in points (5.0 == 5%).
    min_leg_edge: float = Field(default=0.0, ge=-100.0, le=100.0)
    min_parlay_edge: float = Field(default=5.0, ge=-100.0, le=100.0)
    min_combined_prob: float = Field(default=0.15, ge=0.0, le=1.0)
    max_leg_count: int = Field(default=5, ge=2, le=5)
    min_model_agreement: float = Field(default=0.65, ge=0.0, le=1.0)
    max_results: int = Field(default=20, ge=1, le=500)
    parlay_type: ParlayTypeFilter = Field(default="both")

    max_leg_pool: int = Field(default=100, ge=2)
    combination_pool_limit: int = Field(default=30, ge=2, le=60)
    max_candidates_per_leg_count: int = Field(default=5_000, ge=1)

    max_scheduled_runs_per_day: int = Field(default=4, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_api_access_key() -> str:
    key = os.getenv("BESTPARLAYS_API_KEY") or get_settings().bestparlays_api_key
    if not key:
        raise RuntimeError(
            "BESTPARLAYS_API_KEY is not configured. Set it in your environment or .env file."
        )
    return key


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the root logger."""

    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class GenerationConfig(BaseModel):
    """Thresholds for a single best-parlays generation run."""

    min_leg_edge: float = Field(default=0.0, ge=-100.0, le=100.0)
    min_parlay_edge: float = Field(default=5.0, ge=-100.0, le=100.0)
    min_combined_prob: float = Field(default=0.15, ge=0.0, le=1.0)
    max_leg_count: int = Field(default=5, ge=2, le=5)
    min_model_agreement: float = Field(default=0.65, ge=0.0, le=1.0)
    max_results: int = Field(default=20, ge=1, le=500)
    parlay_type: ParlayTypeFilter = "both"

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: object) -> GenerationConfig:
        settings = settings or get_settings()
        values = {name: getattr(settings, name) for name in cls.model_fields}
        values.update(overrides)
        return cls(**values)
