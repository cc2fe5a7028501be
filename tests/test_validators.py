from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from contest_scorer.config import parse_rules
from contest_scorer.context import build_rule_context
from contest_scorer.rules.validators import (
    DEFAULT_MAXIMUM_FREQUENCY_DIFF,
    DEFAULT_MAXIMUM_TIME_DIFF,
    ReciprocalTolerance,
    ValidationContext,
    bands_validator,
    contacted_in_contest_validator,
    exchange_validator,
    is_reciprocal_match,
    mode_validator,
    time_range_validator,
)
from contest_scorer.schemas import Exchange, ValidContact


def _build_context(
    *,
    validation: list[Any] | None = None,
    participants: frozenset[str] = frozenset(),
) -> ValidationContext:
    rules = parse_rules(
        {
            "name": "Sprint",
            "start": "2024-01-01T12:00:00Z",
            "end": "2024-01-01T13:59:59Z",
            "rules": {
                "validation": validation or [],
                "scoring": ["default"],
                "bonus": ["default"],
            },
        }
    )
    return ValidationContext(
        rule_context=build_rule_context(rules),
        participant_callsigns=participants,
    )


def _build_contact(**fields: str) -> dict[str, str]:
    contact = {
        "call": "K2DEF",
        "qso_date": "20240101",
        "time_on": "1230",
        "freq": "14.050",
        "band": "20m",
        "mode": "CW",
    }
    contact.update(fields)
    return contact


def _build_valid_contact(
    *,
    callsign: str,
    contacted: str,
    minute: int = 0,
    freq: str = "14.050",
    exchange: Exchange | None = None,
) -> ValidContact:
    return ValidContact(
        callsign=callsign,
        contacted_callsign=contacted,
        date="20240101",
        time=f"12{minute:02d}",
        freq=freq,
        band="20m",
        mode="CW",
        exchange=exchange or Exchange(),
        timestamp=datetime(2024, 1, 1, 12, minute, tzinfo=timezone.utc),
    )


def test_time_range_validator() -> None:
    context = _build_context()

    assert time_range_validator("K1ABC", _build_contact(), context)
    assert time_range_validator("K1ABC", _build_contact(time_on="135959"), context)
    assert not time_range_validator("K1ABC", _build_contact(time_on="1400"), context)
    assert not time_range_validator("K1ABC", _build_contact(qso_date="20240102"), context)
    assert not time_range_validator("K1ABC", _build_contact(time_on="noon"), context)


def test_bands_validator_uses_configured_ranges() -> None:
    context = _build_context(validation=[["bands", {"20m": ["14.000", "14.350"]}]])

    assert bands_validator("K1ABC", _build_contact(), context)
    assert bands_validator("K1ABC", _build_contact(freq="14.350"), context)
    assert not bands_validator("K1ABC", _build_contact(freq="7.030"), context)
    assert not bands_validator("K1ABC", _build_contact(freq="fourteen"), context)


def test_mode_validator() -> None:
    context = _build_context()

    assert mode_validator("K1ABC", _build_contact(), context, ["CW", "SSB"])
    assert not mode_validator("K1ABC", _build_contact(mode="FT8"), context, ["CW", "SSB"])
    assert not mode_validator("K1ABC", _build_contact(mode=""), context, ["CW"])


def test_contacted_in_contest_validator() -> None:
    context = _build_context(participants=frozenset({"K1ABC", "K2DEF"}))

    assert contacted_in_contest_validator("K1ABC", _build_contact(), context)
    assert not contacted_in_contest_validator("K1ABC", _build_contact(call="N0PE"), context)
    assert not contacted_in_contest_validator("K1ABC", _build_contact(call=""), context)


def test_exchange_validator_requires_both_sides_to_match() -> None:
    context = _build_context()
    pattern = r"^\d{3}$"

    assert exchange_validator(
        "K1ABC", _build_contact(stx_string="001", srx_string="014"), context, pattern
    )
    assert not exchange_validator(
        "K1ABC", _build_contact(stx_string="001", srx_string=""), context, pattern
    )
    assert not exchange_validator(
        "K1ABC", _build_contact(stx_string="001", srx_string="AB"), context, pattern
    )
    assert not exchange_validator("K1ABC", _build_contact(), context, pattern)


def test_reciprocal_tolerance_defaults_and_zero() -> None:
    assert ReciprocalTolerance.from_params(None) == ReciprocalTolerance(
        DEFAULT_MAXIMUM_TIME_DIFF, DEFAULT_MAXIMUM_FREQUENCY_DIFF
    )
    tolerance = ReciprocalTolerance.from_params({"maximumTimeDiff": 0})

    assert tolerance.maximum_time_diff == 0
    assert tolerance.maximum_frequency_diff == DEFAULT_MAXIMUM_FREQUENCY_DIFF


def test_reciprocal_match_checks_time_and_frequency() -> None:
    tolerance = ReciprocalTolerance()
    mine = _build_valid_contact(callsign="A", contacted="B", minute=0)

    assert is_reciprocal_match(
        mine, _build_valid_contact(callsign="B", contacted="A", minute=2, freq="14.052"), tolerance
    )
    assert not is_reciprocal_match(
        mine, _build_valid_contact(callsign="B", contacted="A", minute=3), tolerance
    )
    assert not is_reciprocal_match(
        mine, _build_valid_contact(callsign="B", contacted="A", freq="14.053"), tolerance
    )


def test_reciprocal_match_checks_rst_and_exchange() -> None:
    tolerance = ReciprocalTolerance()
    mine = _build_valid_contact(
        callsign="A",
        contacted="B",
        exchange=Exchange(rst_sent="599", rst_rcvd="579", stx="001", srx="007"),
    )
    mirrored = _build_valid_contact(
        callsign="B",
        contacted="A",
        exchange=Exchange(rst_sent="579", rst_rcvd="599", stx="007", srx="001"),
    )
    wrong_rst = _build_valid_contact(
        callsign="B",
        contacted="A",
        exchange=Exchange(rst_sent="599", rst_rcvd="599", stx="007", srx="001"),
    )
    wrong_exchange = _build_valid_contact(
        callsign="B",
        contacted="A",
        exchange=Exchange(rst_sent="579", rst_rcvd="599", stx="008", srx="001"),
    )

    assert is_reciprocal_match(mine, mirrored, tolerance)
    assert not is_reciprocal_match(mine, wrong_rst, tolerance)
    assert not is_reciprocal_match(mine, wrong_exchange, tolerance)


def test_reciprocal_match_allows_empty_rst_and_exchange() -> None:
    tolerance = ReciprocalTolerance()
    mine = _build_valid_contact(callsign="A", contacted="B")
    theirs = _build_valid_contact(
        callsign="B",
        contacted="A",
        exchange=Exchange(rst_sent="599", rst_rcvd="599"),
    )
    theirs_with_exchange = _build_valid_contact(
        callsign="B",
        contacted="A",
        exchange=Exchange(stx="001"),
    )

    assert is_reciprocal_match(mine, theirs, tolerance)
    assert not is_reciprocal_match(mine, theirs_with_exchange, tolerance)
