from __future__ import annotations

from collections.abc import Mapping

from contest_scorer.context import RuleContext
from contest_scorer.schemas import (
    CallsignCount,
    ContestResult,
    ParticipantContacts,
    ParticipantScoringDetail,
    ScoreRow,
)

from .tiebreaker import apply_tiebreakers


def split_results(
    totals: Mapping[str, float],
    scored: Mapping[str, ParticipantContacts],
    rule_context: RuleContext,
) -> tuple[list[ScoreRow], list[ScoreRow]]:
    """Return ``(competing, non_competing)`` rows, each score-descending.

    Placeholders never rank. Only the competing rows go through tiebreakers.
    """
    competing: list[ScoreRow] = []
    non_competing: list[ScoreRow] = []
    for callsign, total in totals.items():
        entry = scored.get(callsign)
        if entry is None or entry.is_placeholder:
            continue
        if callsign in rule_context.non_competing:
            non_competing.append((callsign, total))
        else:
            competing.append((callsign, total))

    competing.sort(key=lambda row: row[1], reverse=True)
    non_competing.sort(key=lambda row: row[1], reverse=True)
    competing = apply_tiebreakers(competing, scored, rule_context.rules.rules.tiebreaker)
    return competing, non_competing


def sorted_counts(counts: Mapping[str, int]) -> list[CallsignCount]:
    return sorted(counts.items())


def assemble_result(
    *,
    totals: Mapping[str, float],
    scored: Mapping[str, ParticipantContacts],
    rule_context: RuleContext,
    scoring_details: Mapping[str, ParticipantScoringDetail],
    missing_participants: Mapping[str, int],
    blacklisted_found: Mapping[str, int],
) -> ContestResult:
    competing, non_competing = split_results(totals, scored, rule_context)
    return ContestResult(
        results=competing,
        non_competing_results=non_competing,
        scoring_details=dict(scoring_details),
        missing_participants=sorted_counts(missing_participants),
        blacklisted_callsigns_found=sorted_counts(blacklisted_found),
    )
