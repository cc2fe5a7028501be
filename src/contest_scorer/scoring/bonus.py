from __future__ import annotations

import logging
from collections.abc import Mapping

from contest_scorer.context import RuleContext
from contest_scorer.rules.bonusers import BONUSERS
from contest_scorer.rules.scorers import ScoringContext
from contest_scorer.schemas import ParticipantScoringDetail

logger = logging.getLogger(__name__)


def apply_bonus_rules(
    context: ScoringContext,
    rule_context: RuleContext,
    details: Mapping[str, ParticipantScoringDetail],
) -> dict[str, float]:
    """Sum each participant's contact scores and fold the bonus chain over it.

    Placeholders are skipped. The detail keeps the last rule that changed the
    aggregate along with that rule's delta.
    """
    chain = rule_context.rules.rules.bonus
    totals: dict[str, float] = {}
    for callsign, entry in context.valid_contacts.items():
        if entry.is_placeholder:
            continue
        aggregate = entry.total_score
        detail = details[callsign]
        for rule in chain:
            updated = BONUSERS[rule.name](aggregate, context, rule.params)
            if updated != aggregate:
                detail.bonus_rule_applied = str(rule.name)
                detail.given_bonus = float(updated - aggregate)
                aggregate = updated
        totals[callsign] = aggregate

    logger.debug("bonus applied participants=%s", len(totals))
    return totals
