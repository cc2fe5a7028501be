"""Rule-driven scoring for radio contest logs."""

from importlib.metadata import PackageNotFoundError, version

from .config import (
    BonusRule,
    RuleEntry,
    RuleSet,
    RulesConfig,
    ScoringRule,
    TiebreakerRule,
    ValidationRule,
    load_rules,
    parse_rules,
)
from .pipeline import score_contest
from .schemas import (
    ContactScoringDetail,
    ContestResult,
    ParticipantScoringDetail,
    Submission,
)

__all__ = [
    "BonusRule",
    "ContactScoringDetail",
    "ContestResult",
    "ParticipantScoringDetail",
    "RuleEntry",
    "RuleSet",
    "RulesConfig",
    "ScoringRule",
    "Submission",
    "TiebreakerRule",
    "ValidationRule",
    "load_rules",
    "parse_rules",
    "score_contest",
]

try:
    __version__ = version("contest-scorer")
except PackageNotFoundError:
    __version__ = "0+unknown"
