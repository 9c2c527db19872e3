"""Correlation rules between legs of the same match."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import NamedTuple

from bestparlays.parlays.types import MarketLeg

HIGH_TOTAL_LINE = 2.5

MULTI_GAME_PENALTY = 0.92
MULTI_GAME_CORRELATED_PENALTY = 0.90
SINGLE_GAME_PENALTY = 0.85
SINGLE_GAME_CORRELATED_PENALTY = 0.80


class Selection(NamedTuple):
    market_type: str
    market_subtype: str
    line: float | None

    @classmethod
    def of(cls, leg: MarketLeg) -> Selection:
        return cls(
            (leg.market_type or "").upper(),
            (leg.market_subtype or "").upper(),
            leg.line,
        )


CorrelationRule = Callable[[Selection, Selection], bool]


def _is_home_win(sel: Selection) -> bool:
    return sel.market_type == "1X2" and sel.market_subtype == "HOME"


def _is_high_over(sel: Selection) -> bool:
    return (
        sel.market_type == "TOTALS"
        and sel.market_subtype == "OVER"
        and sel.line is not None
        and sel.line >= HIGH_TOTAL_LINE
    )


def _is_btts_yes(sel: Selection) -> bool:
    return sel.market_type == "BTTS" and sel.market_subtype == "YES"


def _pairing(first: Callable[[Selection], bool], second: Callable[[Selection], bool]) -> CorrelationRule:
    def rule(a: Selection, b: Selection) -> bool:
        return first(a) and second(b)

    return rule


DEFAULT_RULES: Mapping[str, CorrelationRule] = {
    "home_win+over": _pairing(_is_home_win, _is_high_over),
    "home_win+btts_yes": _pairing(_is_home_win, _is_btts_yes),
    "over+btts_yes": _pairing(_is_high_over, _is_btts_yes),
}


@dataclass(frozen=True)
class CorrelationResult:
    correlated: bool
    rule: str | None = None


class CorrelationClassifier:
    """Decides whether two legs are correlated using an explicit rule table.

    Rules only apply to legs of the same match and are checked in both
    argument orders, so a rule only needs to describe one pairing.
    """

    def __init__(self, rules: Mapping[str, CorrelationRule] | None = None) -> None:
        self.rules = dict(DEFAULT_RULES if rules is None else rules)

    def classify(self, leg_a: MarketLeg, leg_b: MarketLeg) -> CorrelationResult:
        if leg_a.match_id != leg_b.match_id:
            return CorrelationResult(False)
        sel_a, sel_b = Selection.of(leg_a), Selection.of(leg_b)
        for name, rule in self.rules.items():
            if rule(sel_a, sel_b) or rule(sel_b, sel_a):
                return CorrelationResult(True, name)
        return CorrelationResult(False)

    def has_correlated_pair(self, legs: Iterable[MarketLeg]) -> bool:
        return any(
            self.classify(leg_a, leg_b).correlated
            for leg_a, leg_b in itertools.combinations(list(legs), 2)
        )


def correlation_penalty(is_multi_game: bool, has_correlation: bool) -> float:
    """Multiplier applied to the independent joint probability."""

    if is_multi_game:
        return MULTI_GAME_CORRELATED_PENALTY if has_correlation else MULTI_GAME_PENALTY
    return SINGLE_GAME_CORRELATED_PENALTY if has_correlation else SINGLE_GAME_PENALTY
