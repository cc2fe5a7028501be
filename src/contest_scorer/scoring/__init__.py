"""Contact scoring and participant bonus."""

from .bonus import apply_bonus_rules
from .scorer import ContactScorer, score_contacts

__all__ = [
    "ContactScorer",
    "apply_bonus_rules",
    "score_contacts",
]
