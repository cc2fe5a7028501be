"""Rule tables for validation, scoring, bonus and tiebreaking."""

from .bonusers import BONUSERS, DEFAULT_BONUS_MULTIPLIER, default_bonus
from .scorers import (
    DEFAULT_CONTACT_POINTS,
    SCORERS,
    ScoringContext,
    bonus_stations_scorer,
    default_scorer,
    time_range_scorer,
)
from .tiebreakers import (
    TIEBREAKERS,
    default_tiebreaker,
    minimum_time_tiebreaker,
    valid_stations_tiebreaker,
)
from .validators import (
    DEFAULT_MAXIMUM_FREQUENCY_DIFF,
    DEFAULT_MAXIMUM_TIME_DIFF,
    DEFERRED_VALIDATION_RULES,
    VALIDATORS,
    ReciprocalTolerance,
    ValidationContext,
    bands_validator,
    contacted_in_contest_validator,
    exchange_validator,
    is_reciprocal_match,
    mode_validator,
    time_range_validator,
)

__all__ = [
    "BONUSERS",
    "DEFAULT_BONUS_MULTIPLIER",
    "DEFAULT_CONTACT_POINTS",
    "DEFAULT_MAXIMUM_FREQUENCY_DIFF",
    "DEFAULT_MAXIMUM_TIME_DIFF",
    "DEFERRED_VALIDATION_RULES",
    "ReciprocalTolerance",
    "SCORERS",
    "ScoringContext",
    "TIEBREAKERS",
    "VALIDATORS",
    "ValidationContext",
    "bands_validator",
    "bonus_stations_scorer",
    "contacted_in_contest_validator",
    "default_bonus",
    "default_scorer",
    "default_tiebreaker",
    "exchange_validator",
    "is_reciprocal_match",
    "minimum_time_tiebreaker",
    "mode_validator",
    "time_range_scorer",
    "time_range_validator",
    "valid_stations_tiebreaker",
]
