"""Error taxonomy for parlay generation."""

from __future__ import annotations

from typing import Any


class ParlayEngineError(Exception):
    """Base class for engine errors."""


class IneligibleLeg(ParlayEngineError):
    """A leg fails the eligibility invariant and is excluded from the pool."""

    def __init__(self, leg_key: tuple, reason: str) -> None:
        super().__init__(f"{leg_key}: {reason}")
        self.leg_key = leg_key
        self.reason = reason


class InvalidCandidate(ParlayEngineError):
    """A candidate has too few legs, duplicate legs or an ineligible leg."""


class DegenerateProbability(ParlayEngineError):
    """Scoring produced a non-positive adjusted probability."""


class PersistenceConflict(ParlayEngineError):
    """An active parlay with the same leg set already exists."""

    def __init__(self, dedup_key: str, existing_id: str | None = None) -> None:
        super().__init__(f"active parlay already exists for {dedup_key}")
        self.dedup_key = dedup_key
        self.existing_id = existing_id


class RepositoryUnavailable(ParlayEngineError):
    """The market leg repository could not be read; the whole run fails."""

    def __init__(self, message: str, result: Any | None = None) -> None:
        super().__init__(message)
        self.result = result
