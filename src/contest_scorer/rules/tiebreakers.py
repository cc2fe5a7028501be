from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime

from contest_scorer.config import TiebreakerRule
from contest_scorer.schemas import ParticipantContacts

ScoredContacts = Mapping[str, ParticipantContacts]
Tiebreaker = Callable[[str, str, ScoredContacts], int]


def default_tiebreaker(first: str, second: str, scored: ScoredContacts) -> int:
    return 0


def valid_stations_tiebreaker(first: str, second: str, scored: ScoredContacts) -> int:
    """More distinct contacted stations ranks first."""
    return _distinct_stations(scored, second) - _distinct_stations(scored, first)


def minimum_time_tiebreaker(first: str, second: str, scored: ScoredContacts) -> int:
    """Shorter first-to-last contact span ranks first.

    A participant with at most one contact never beats one with two or more,
    and two such participants tie.
    """
    first_times = _timestamps(scored, first)
    second_times = _timestamps(scored, second)

    if len(first_times) <= 1 and len(second_times) <= 1:
        return 0
    if len(first_times) <= 1:
        return 1
    if len(second_times) <= 1:
        return -1

    first_span = max(first_times) - min(first_times)
    second_span = max(second_times) - min(second_times)
    if first_span == second_span:
        return 0
    return -1 if first_span < second_span else 1


TIEBREAKERS: Mapping[TiebreakerRule, Tiebreaker] = {
    TiebreakerRule.DEFAULT: default_tiebreaker,
    TiebreakerRule.VALID_STATIONS: valid_stations_tiebreaker,
    TiebreakerRule.MINIMUM_TIME: minimum_time_tiebreaker,
}


def _distinct_stations(scored: ScoredContacts, callsign: str) -> int:
    entry = scored.get(callsign)
    if entry is None:
        return 0
    return len({contact.contacted_callsign for contact in entry.contacts})


def _timestamps(scored: ScoredContacts, callsign: str) -> list[datetime]:
    entry = scored.get(callsign)
    if entry is None:
        return []
    return [contact.timestamp for contact in entry.contacts if contact.timestamp is not None]
