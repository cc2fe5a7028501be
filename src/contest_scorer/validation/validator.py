from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from contest_scorer.config import ValidationRule
from contest_scorer.contact_fields import (
    contact_datetime,
    contact_field,
    contacted_callsign,
    parse_frequency,
)
from contest_scorer.context import RuleContext
from contest_scorer.rules.validators import (
    DEFERRED_VALIDATION_RULES,
    VALIDATORS,
    ReciprocalTolerance,
    ValidationContext,
    is_reciprocal_match,
)
from contest_scorer.schemas import (
    ContactScoringDetail,
    Exchange,
    ParticipantContacts,
    ParticipantScoringDetail,
    RawContact,
    Submission,
    ValidContact,
)

from .index import ContactIndex

logger = logging.getLogger(__name__)

BLACKLIST_RULE = "blacklist"
MISSING_CALLSIGN_RULE = "callsign"

_DETAIL_FIELDS = (
    "call",
    "qso_date",
    "time_on",
    "band",
    "freq",
    "mode",
    "rst_sent",
    "rst_rcvd",
    "stx_string",
    "srx_string",
)


@dataclass(slots=True)
class ValidationOutcome:
    valid_contacts: dict[str, ParticipantContacts] = field(default_factory=dict)
    scoring_details: dict[str, ParticipantScoringDetail] = field(default_factory=dict)
    appearance_counts: Counter[str] = field(default_factory=Counter)
    missing_participants: Counter[str] = field(default_factory=Counter)
    blacklisted_found: Counter[str] = field(default_factory=Counter)


def merge_submissions(submissions: Iterable[Submission]) -> dict[str, list[RawContact]]:
    """Group logs by callsign, concatenating repeated submissions in order."""
    merged: dict[str, list[RawContact]] = {}
    for callsign, contacts in submissions:
        normalized = (callsign or "").strip()
        if not normalized:
            logger.warning("skipping submission without callsign contacts=%s", len(contacts))
            continue
        if normalized in merged:
            logger.warning("duplicate submission merged callsign=%s", normalized)
            merged[normalized].extend(contacts)
        else:
            merged[normalized] = list(contacts)
    return merged


def validate_contacts(
    submissions: Iterable[Submission],
    rule_context: RuleContext,
) -> ValidationOutcome:
    logs = merge_submissions(submissions)
    rules = rule_context.rules
    outcome = ValidationOutcome()

    competing_logs: dict[str, list[RawContact]] = {}
    for callsign, contacts in logs.items():
        if callsign in rule_context.blacklist:
            outcome.blacklisted_found.setdefault(callsign, 0)
            logger.info("skipping blacklisted submitter callsign=%s", callsign)
            continue
        competing_logs[callsign] = contacts

    context = ValidationContext(
        rule_context=rule_context,
        participant_callsigns=frozenset(competing_logs),
    )

    survivors: dict[str, list[ValidContact]] = {}
    for callsign, contacts in competing_logs.items():
        detail = ParticipantScoringDetail()
        outcome.scoring_details[callsign] = detail
        survivors[callsign] = _initial_pass(
            callsign,
            contacts,
            context=context,
            detail=detail,
            blacklisted_found=outcome.blacklisted_found,
        )

    _count_missing(survivors, competing_logs, outcome.missing_participants)

    index = ContactIndex.build(contact for contacts in survivors.values() for contact in contacts)
    logger.debug("contact index built contacts=%s", len(index))

    default_entry = rules.rules.find_validation(ValidationRule.DEFAULT)
    if default_entry is not None:
        tolerance = ReciprocalTolerance.from_params(default_entry.params)
        for callsign, contacts in survivors.items():
            survivors[callsign] = _reciprocal_pass(
                contacts,
                index=index,
                tolerance=tolerance,
                submitted=competing_logs,
                allow_missing=rules.allow_missing_participants,
                detail=outcome.scoring_details[callsign],
            )

    if rules.rules.find_validation(ValidationRule.UNIQUE_CONTACTS_BY_TIME_RANGE) is not None:
        for callsign, contacts in survivors.items():
            survivors[callsign] = _unique_by_time_range_pass(
                contacts,
                rule_context=rule_context,
                detail=outcome.scoring_details[callsign],
            )

    for contacts in survivors.values():
        outcome.appearance_counts.update(_distinct_contacted(contacts))

    outcome.valid_contacts = {
        callsign: ParticipantContacts(callsign=callsign, contacts=contacts)
        for callsign, contacts in survivors.items()
    }

    minimum_entry = rules.rules.find_validation(ValidationRule.MINIMUM_CONTACTS)
    if minimum_entry is not None:
        _apply_minimum_appearances(
            outcome,
            threshold=minimum_entry.params,
            allow_missing=rules.allow_missing_participants,
            submitted=competing_logs,
        )

    logger.info(
        "validation finished participants=%s valid_contacts=%s missing=%s blacklisted=%s",
        len(outcome.valid_contacts),
        sum(len(entry.contacts) for entry in outcome.valid_contacts.values()),
        len(outcome.missing_participants),
        len(outcome.blacklisted_found),
    )
    return outcome


def _initial_pass(
    callsign: str,
    contacts: Sequence[RawContact],
    *,
    context: ValidationContext,
    detail: ParticipantScoringDetail,
    blacklisted_found: Counter[str],
) -> list[ValidContact]:
    rule_context = context.rule_context
    predicates = [
        entry
        for entry in rule_context.rules.rules.validation
        if entry.name not in DEFERRED_VALIDATION_RULES
    ]
    blacklisted_in_log: set[str] = set()
    survivors: list[ValidContact] = []

    for position, contact in enumerate(contacts):
        contact_detail = ContactScoringDetail(contact=_detail_fields(contact, rule_context))
        detail.contacts.append(contact_detail)

        contacted = contacted_callsign(contact)
        if not contacted:
            contact_detail.invalid_rule = MISSING_CALLSIGN_RULE
            continue
        if contacted in rule_context.blacklist:
            contact_detail.invalid_rule = BLACKLIST_RULE
            blacklisted_in_log.add(contacted)
            continue

        for entry in predicates:
            if not VALIDATORS[entry.name](callsign, contact, context, entry.params):
                contact_detail.invalid_rule = str(entry.name)
                break
        else:
            survivors.append(
                _to_valid_contact(
                    callsign,
                    contact,
                    band=contact_detail.contact["band"],
                    detail_index=position,
                )
            )

    blacklisted_found.update(blacklisted_in_log)
    logger.debug(
        "initial pass callsign=%s contacts=%s survivors=%s",
        callsign,
        len(contacts),
        len(survivors),
    )
    return survivors


def _reciprocal_pass(
    contacts: list[ValidContact],
    *,
    index: ContactIndex,
    tolerance: ReciprocalTolerance,
    submitted: Mapping[str, Sequence[RawContact]],
    allow_missing: bool,
    detail: ParticipantScoringDetail,
) -> list[ValidContact]:
    accepted: list[ValidContact] = []
    for contact in contacts:
        if contact.contacted_callsign == contact.callsign:
            matched = False
        elif contact.contacted_callsign not in submitted:
            matched = allow_missing
        else:
            matched = any(
                is_reciprocal_match(contact, candidate, tolerance)
                for candidate in index.counterparts(contact)
            )
        if matched:
            accepted.append(contact)
        else:
            detail.contacts[contact.detail_index].invalid_rule = str(ValidationRule.DEFAULT)
    return accepted


def _unique_by_time_range_pass(
    contacts: list[ValidContact],
    *,
    rule_context: RuleContext,
    detail: ParticipantScoringDetail,
) -> list[ValidContact]:
    seen: set[tuple[str, str]] = set()
    accepted: list[ValidContact] = []
    for contact in contacts:
        window = None if contact.timestamp is None else rule_context.window_for(contact.timestamp)
        key = (window or "", contact.contacted_callsign)
        if window is None or key in seen:
            detail.contacts[contact.detail_index].invalid_rule = str(
                ValidationRule.UNIQUE_CONTACTS_BY_TIME_RANGE
            )
            continue
        seen.add(key)
        accepted.append(contact)
    return accepted


def _apply_minimum_appearances(
    outcome: ValidationOutcome,
    *,
    threshold: int,
    allow_missing: bool,
    submitted: Mapping[str, Sequence[RawContact]],
) -> None:
    for callsign in list(outcome.valid_contacts):
        detail = outcome.scoring_details[callsign]
        if outcome.appearance_counts[callsign] >= threshold:
            continue
        detail.has_minimum_appearances = False
        for contact in outcome.valid_contacts.pop(callsign).contacts:
            detail.contacts[contact.detail_index].invalid_rule = str(
                ValidationRule.MINIMUM_CONTACTS
            )
        logger.info(
            "participant below minimum appearances callsign=%s appearances=%s threshold=%s",
            callsign,
            outcome.appearance_counts[callsign],
            threshold,
        )

    if not allow_missing:
        return
    for callsign in sorted(outcome.missing_participants):
        if callsign in submitted or callsign in outcome.valid_contacts:
            continue
        if outcome.appearance_counts[callsign] >= threshold:
            outcome.valid_contacts[callsign] = ParticipantContacts.placeholder(callsign)


def _count_missing(
    survivors: Mapping[str, list[ValidContact]],
    submitted: Mapping[str, Sequence[RawContact]],
    missing: Counter[str],
) -> None:
    for contacts in survivors.values():
        missing.update(
            contacted for contacted in _distinct_contacted(contacts) if contacted not in submitted
        )


def _distinct_contacted(contacts: Iterable[ValidContact]) -> set[str]:
    return {
        contact.contacted_callsign
        for contact in contacts
        if contact.contacted_callsign and contact.contacted_callsign != contact.callsign
    }


def _detail_fields(contact: RawContact, rule_context: RuleContext) -> dict[str, str]:
    fields = {name: contact_field(contact, name) for name in _DETAIL_FIELDS}
    if rule_context.band_ranges:
        frequency = parse_frequency(fields["freq"])
        band = None if frequency is None else rule_context.band_for(frequency)
        if band is not None:
            fields["band"] = band
    return fields


def _to_valid_contact(
    callsign: str,
    contact: RawContact,
    *,
    band: str,
    detail_index: int,
) -> ValidContact:
    return ValidContact(
        callsign=callsign,
        contacted_callsign=contacted_callsign(contact),
        date=contact_field(contact, "qso_date"),
        time=contact_field(contact, "time_on"),
        freq=contact_field(contact, "freq"),
        band=band,
        mode=contact_field(contact, "mode"),
        exchange=Exchange(
            rst_sent=contact_field(contact, "rst_sent"),
            rst_rcvd=contact_field(contact, "rst_rcvd"),
            stx=contact_field(contact, "stx_string"),
            srx=contact_field(contact, "srx_string"),
        ),
        detail_index=detail_index,
        timestamp=contact_datetime(contact),
    )
