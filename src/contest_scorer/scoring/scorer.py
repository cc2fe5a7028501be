from __future__ import annotations

import logging
from collections.abc import Mapping

from contest_scorer.config import ScoringRule
from contest_scorer.context import RuleContext
from contest_scorer.rules.scorers import SCORERS, ScoringContext
from contest_scorer.schemas import ParticipantContacts, ParticipantScoringDetail, ValidContact

logger = logging.getLogger(__name__)


class ContactScorer:
    """Folds the configured scoring rules over every validated contact.

    Rules override rather than add: each returns a new score or passes the
    current one through. The last rule that changed a contact's score is
    recorded on its detail entry. ``minimumContacts`` gates both the owner
    (by logged contact count) and each contacted station (by appearance
    count) before the chain runs.
    """

    def __init__(self, rule_context: RuleContext) -> None:
        self.rule_context = rule_context
        rule_set = rule_context.rules.rules
        minimum_entry = rule_set.find_scoring(ScoringRule.MINIMUM_CONTACTS)
        self.minimum_contacts: int | None = (
            None if minimum_entry is None else minimum_entry.params
        )
        self.chain = [
            entry for entry in rule_set.scoring if entry.name != ScoringRule.MINIMUM_CONTACTS
        ]

    def score(
        self,
        valid_contacts: Mapping[str, ParticipantContacts],
        details: Mapping[str, ParticipantScoringDetail],
        appearance_counts: Mapping[str, int],
    ) -> ScoringContext:
        context = ScoringContext(
            valid_contacts=valid_contacts,
            time_windows=self.rule_context.time_windows,
            appearance_counts=appearance_counts,
        )
        for callsign, entry in valid_contacts.items():
            if entry.is_placeholder:
                continue
            detail = details[callsign]
            logged = len(detail.contacts)
            if self.minimum_contacts is not None and logged < self.minimum_contacts:
                logger.info(
                    "participant below minimum contacts callsign=%s contacts=%s threshold=%s",
                    callsign,
                    logged,
                    self.minimum_contacts,
                )
                for contact in entry.contacts:
                    self._record(contact, detail, score=0, rule=ScoringRule.MINIMUM_CONTACTS)
                continue
            for contact in entry.contacts:
                self._score_contact(contact, context, detail)

        logger.debug("scoring finished participants=%s", len(valid_contacts))
        return context

    def _score_contact(
        self,
        contact: ValidContact,
        context: ScoringContext,
        detail: ParticipantScoringDetail,
    ) -> None:
        if (
            self.minimum_contacts is not None
            and context.appearance_counts.get(contact.contacted_callsign, 0) < self.minimum_contacts
        ):
            self._record(contact, detail, score=0, rule=ScoringRule.MINIMUM_CONTACTS)
            return

        applied: str | None = None
        for entry in self.chain:
            updated = SCORERS[entry.name](contact, context, entry.params)
            if updated != contact.score:
                applied = str(entry.name)
                contact.score = updated
        self._record(contact, detail, score=contact.score, rule=applied)

    @staticmethod
    def _record(
        contact: ValidContact,
        detail: ParticipantScoringDetail,
        *,
        score: float,
        rule: str | None,
    ) -> None:
        contact.score = score
        contact_detail = detail.contacts[contact.detail_index]
        contact_detail.score_rule = None if rule is None else str(rule)
        contact_detail.given_score = float(score)


def score_contacts(
    valid_contacts: Mapping[str, ParticipantContacts],
    rule_context: RuleContext,
    details: Mapping[str, ParticipantScoringDetail],
    appearance_counts: Mapping[str, int],
) -> ScoringContext:
    return ContactScorer(rule_context).score(valid_contacts, details, appearance_counts)
