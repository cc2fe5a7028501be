from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from contest_scorer.config import ValidationRule
from contest_scorer.contact_fields import (
    contact_datetime,
    contact_field,
    contacted_callsign,
    frequencies_within_tolerance,
    minutes_between,
    parse_frequency,
)
from contest_scorer.context import RuleContext
from contest_scorer.schemas import RawContact, ValidContact

DEFAULT_MAXIMUM_TIME_DIFF = 2.0
DEFAULT_MAXIMUM_FREQUENCY_DIFF = 2.0

# Order-sensitive rules run as dedicated validator stages, not as predicates.
DEFERRED_VALIDATION_RULES = frozenset(
    {
        ValidationRule.DEFAULT,
        ValidationRule.UNIQUE_CONTACTS_BY_TIME_RANGE,
        ValidationRule.MINIMUM_CONTACTS,
    }
)


@dataclass(frozen=True, slots=True)
class ValidationContext:
    rule_context: RuleContext
    participant_callsigns: frozenset[str]


ContactPredicate = Callable[[str, RawContact, ValidationContext, Any], bool]


def time_range_validator(
    callsign: str, contact: RawContact, context: ValidationContext, params: Any = None
) -> bool:
    contact_at = contact_datetime(contact)
    if contact_at is None:
        return False
    rule_context = context.rule_context
    return rule_context.contest_start <= contact_at <= rule_context.contest_end


def bands_validator(
    callsign: str, contact: RawContact, context: ValidationContext, params: Any = None
) -> bool:
    frequency = parse_frequency(contact_field(contact, "freq"))
    if frequency is None:
        return False
    return context.rule_context.band_for(frequency) is not None


def mode_validator(
    callsign: str, contact: RawContact, context: ValidationContext, params: Any = None
) -> bool:
    mode = contact_field(contact, "mode")
    if not mode:
        return False
    return mode in (params or [])


def contacted_in_contest_validator(
    callsign: str, contact: RawContact, context: ValidationContext, params: Any = None
) -> bool:
    contacted = contacted_callsign(contact)
    return bool(contacted) and contacted in context.participant_callsigns


def exchange_validator(
    callsign: str, contact: RawContact, context: ValidationContext, params: Any = None
) -> bool:
    received = contact_field(contact, "srx_string")
    sent = contact_field(contact, "stx_string")
    if not received or not sent:
        return False
    pattern = _compile(params or "")
    return all(pattern.search(exchange) for exchange in (received, sent))


VALIDATORS: Mapping[ValidationRule, ContactPredicate] = {
    ValidationRule.TIME_RANGE: time_range_validator,
    ValidationRule.BANDS: bands_validator,
    ValidationRule.MODE: mode_validator,
    ValidationRule.CONTACTED_IN_CONTEST: contacted_in_contest_validator,
    ValidationRule.EXCHANGE: exchange_validator,
}


@dataclass(frozen=True, slots=True)
class ReciprocalTolerance:
    maximum_time_diff: float = DEFAULT_MAXIMUM_TIME_DIFF
    maximum_frequency_diff: float = DEFAULT_MAXIMUM_FREQUENCY_DIFF

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None) -> ReciprocalTolerance:
        options = params or {}
        time_diff = options.get("maximumTimeDiff")
        frequency_diff = options.get("maximumFrequencyDiff")
        return cls(
            maximum_time_diff=(
                DEFAULT_MAXIMUM_TIME_DIFF if time_diff is None else float(time_diff)
            ),
            maximum_frequency_diff=(
                DEFAULT_MAXIMUM_FREQUENCY_DIFF if frequency_diff is None else float(frequency_diff)
            ),
        )


def is_reciprocal_match(
    contact: ValidContact,
    candidate: ValidContact,
    tolerance: ReciprocalTolerance,
) -> bool:
    """Check ``candidate`` (from the other party's log) confirms ``contact``.

    Time is compared in minutes and frequency in kHz. RST must be empty on
    this side or mirrored, and the exchange must be empty on both sides or
    mirrored.
    """
    if contact.timestamp is None or candidate.timestamp is None:
        return False
    if minutes_between(contact.timestamp, candidate.timestamp) > tolerance.maximum_time_diff:
        return False
    if not frequencies_within_tolerance(
        contact.freq, candidate.freq, tolerance.maximum_frequency_diff
    ):
        return False

    mine = contact.exchange
    theirs = candidate.exchange

    rst_match = (mine.rst_sent == "" and mine.rst_rcvd == "") or (
        mine.rst_sent == theirs.rst_rcvd and mine.rst_rcvd == theirs.rst_sent
    )
    if not rst_match:
        return False

    has_exchange = any((mine.stx, mine.srx, theirs.stx, theirs.srx))
    if not has_exchange:
        return True
    return mine.stx == theirs.srx and mine.srx == theirs.stx


@lru_cache(maxsize=64)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)
