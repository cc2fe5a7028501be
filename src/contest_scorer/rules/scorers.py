from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from contest_scorer.config import ScoringRule
from contest_scorer.context import TimeWindow
from contest_scorer.schemas import ParticipantContacts, ValidContact

DEFAULT_CONTACT_POINTS = 1


@dataclass(frozen=True, slots=True)
class ScoringContext:
    valid_contacts: Mapping[str, ParticipantContacts]
    time_windows: Mapping[str, TimeWindow]
    appearance_counts: Mapping[str, int] = field(default_factory=dict)


ContactScorer = Callable[[ValidContact, ScoringContext, Any], float]


def default_scorer(contact: ValidContact, context: ScoringContext, params: Any = None) -> float:
    return DEFAULT_CONTACT_POINTS if params is None else params


def time_range_scorer(
    contact: ValidContact, context: ScoringContext, params: Any = None
) -> float:
    if contact.timestamp is None:
        return contact.score
    points = params or {}
    for name, window in context.time_windows.items():
        if window.contains(contact.timestamp):
            return points.get(name, contact.score)
    return contact.score


def bonus_stations_scorer(
    contact: ValidContact, context: ScoringContext, params: Any = None
) -> float:
    return (params or {}).get(contact.contacted_callsign, contact.score)


# minimumContacts gates contacts before this chain runs; see scoring.scorer.
SCORERS: Mapping[ScoringRule, ContactScorer] = {
    ScoringRule.DEFAULT: default_scorer,
    ScoringRule.TIME_RANGE: time_range_scorer,
    ScoringRule.BONUS_STATIONS: bonus_stations_scorer,
}
