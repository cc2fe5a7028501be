from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from contest_scorer.config import BonusRule

from .scorers import ScoringContext

DEFAULT_BONUS_MULTIPLIER = 1

Bonuser = Callable[[float, ScoringContext, Any], float]


def default_bonus(score: float, context: ScoringContext, params: Any = None) -> float:
    multiplier = DEFAULT_BONUS_MULTIPLIER if params is None else params
    return score * multiplier


BONUSERS: Mapping[BonusRule, Bonuser] = {
    BonusRule.DEFAULT: default_bonus,
}
