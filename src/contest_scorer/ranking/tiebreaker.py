from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import cmp_to_key
from itertools import groupby

from contest_scorer.config import TiebreakerRule
from contest_scorer.rules.tiebreakers import TIEBREAKERS
from contest_scorer.schemas import ParticipantContacts, ScoreRow


def apply_tiebreakers(
    rows: Sequence[ScoreRow],
    scored: Mapping[str, ParticipantContacts],
    rules: Sequence[TiebreakerRule],
) -> list[ScoreRow]:
    """Reorder runs of equal scores in ``rows`` (already score-descending).

    The first rule that tells two participants apart decides their order;
    participants no rule separates keep their relative order.
    """
    if not rules:
        return list(rows)

    comparators = [TIEBREAKERS[rule] for rule in rules]

    def compare(first: ScoreRow, second: ScoreRow) -> int:
        for comparator in comparators:
            result = comparator(first[0], second[0], scored)
            if result:
                return result
        return 0

    ordered: list[ScoreRow] = []
    for _, group in groupby(rows, key=lambda row: row[1]):
        members = list(group)
        if len(members) > 1:
            members.sort(key=cmp_to_key(compare))
        ordered.extend(members)
    return ordered
