"""Multi-pass contact validation."""

from .index import ContactIndex
from .validator import (
    BLACKLIST_RULE,
    MISSING_CALLSIGN_RULE,
    ValidationOutcome,
    merge_submissions,
    validate_contacts,
)

__all__ = [
    "BLACKLIST_RULE",
    "MISSING_CALLSIGN_RULE",
    "ContactIndex",
    "ValidationOutcome",
    "merge_submissions",
    "validate_contacts",
]
