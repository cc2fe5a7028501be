from __future__ import annotations

import copy
from typing import Any

import pytest

from contest_scorer import ContestResult, score_contest


def _build_rules(
    *,
    validation: list[Any] | None = None,
    scoring: list[Any] | None = None,
    bonus: list[Any] | None = None,
    tiebreaker: list[str] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Winter Sprint",
        "start": "2024-01-01T00:00:00Z",
        "end": "2024-01-01T23:59:59Z",
        "rules": {
            "validation": (
                validation if validation is not None else [["default", {"maximumTimeDiff": 2}]]
            ),
            "scoring": scoring if scoring is not None else ["default"],
            "bonus": bonus if bonus is not None else ["default"],
            "tiebreaker": tiebreaker or [],
        },
    }
    payload.update(overrides)
    return payload


def _build_contact(
    *,
    call: str,
    time_on: str = "1200",
    freq: str = "14.050",
    stx: str = "",
    srx: str = "",
) -> dict[str, str]:
    return {
        "call": call,
        "qso_date": "20240101",
        "time_on": time_on,
        "freq": freq,
        "band": "20m",
        "mode": "CW",
        "stx_string": stx,
        "srx_string": srx,
    }


def _reciprocal_pair(first: str, second: str, *, time_on: str = "1200") -> tuple[dict, dict]:
    return (
        _build_contact(call=second, time_on=time_on, stx="001", srx="002"),
        _build_contact(call=first, time_on=time_on, stx="002", srx="001"),
    )


def test_reciprocal_contacts_score_default_points() -> None:
    a_to_b = _build_contact(call="B", time_on="1200", freq="14.050", stx="001", srx="002")
    b_to_a = _build_contact(call="A", time_on="1201", freq="14.051", stx="002", srx="001")

    result = score_contest([("A", [a_to_b]), ("B", [b_to_a])], _build_rules())

    assert result.results == [("A", 1), ("B", 1)]
    for callsign in ("A", "B"):
        detail = result.scoring_details[callsign].contacts[0]
        assert detail.invalid_rule is None
        assert detail.score_rule == "default"
        assert detail.given_score == 1


def test_unconfirmed_contacts_score_zero_but_still_rank() -> None:
    a_to_b = _build_contact(call="B", time_on="1200")
    b_to_a = _build_contact(call="A", time_on="1210")

    result = score_contest([("A", [a_to_b]), ("B", [b_to_a])], _build_rules())

    assert result.results == [("A", 0), ("B", 0)]
    assert result.scoring_details["A"].contacts[0].invalid_rule == "default"


def test_score_rule_and_given_score_agree() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    unconfirmed = _build_contact(call="B", time_on="1500")

    result = score_contest([("A", [a_to_b, unconfirmed]), ("B", [b_to_a])], _build_rules())

    for detail in result.scoring_details.values():
        for contact in detail.contacts:
            assert (contact.score_rule is None) == (contact.given_score == 0)


def test_missing_participants_are_reported_and_optionally_scored() -> None:
    log = [_build_contact(call="Z"), _build_contact(call="Y", time_on="1300")]

    strict = score_contest([("A", log)], _build_rules())
    lenient = score_contest([("A", log)], _build_rules(allowMissingParticipants=True))

    assert strict.results == [("A", 0)]
    assert strict.missing_participants == [("Y", 1), ("Z", 1)]
    assert lenient.results == [("A", 2)]
    assert lenient.missing_participants == [("Y", 1), ("Z", 1)]


def test_own_and_blank_callsigns_score_nothing() -> None:
    log = [_build_contact(call="A"), _build_contact(call="", time_on="1300")]

    result = score_contest([("A", log)], _build_rules(allowMissingParticipants=True))

    assert result.results == [("A", 0)]
    assert result.missing_participants == []
    assert [contact.invalid_rule for contact in result.scoring_details["A"].contacts] == [
        "default",
        "callsign",
    ]


def test_contacted_in_contest_rejects_missing_participants() -> None:
    result = score_contest(
        [("A", [_build_contact(call="Z")])],
        _build_rules(validation=["contactedInContest"], allowMissingParticipants=True),
    )

    assert result.results == [("A", 0)]
    assert result.scoring_details["A"].contacts[0].invalid_rule == "contactedInContest"


def test_blacklisted_callsigns_never_rank() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    a_to_x = _build_contact(call="X", time_on="1300")
    x_to_a = _build_contact(call="A", time_on="1300")

    result = score_contest(
        [("A", [a_to_b, a_to_x]), ("B", [b_to_a]), ("X", [x_to_a])],
        _build_rules(blacklist=["X"]),
    )

    ranked = [callsign for callsign, _ in [*result.results, *result.non_competing_results]]
    assert "X" not in ranked
    assert "X" not in result.scoring_details
    assert result.blacklisted_callsigns_found == [("X", 1)]
    assert result.scoring_details["A"].contacts[1].invalid_rule == "blacklist"
    assert result.results == [("A", 1), ("B", 1)]


def test_non_competing_participants_are_split_out() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    a_to_c, c_to_a = _reciprocal_pair("A", "C", time_on="1300")

    result = score_contest(
        [("A", [a_to_b, a_to_c]), ("B", [b_to_a]), ("C", [c_to_a])],
        _build_rules(nonCompeting=["C"]),
    )

    assert result.results == [("A", 2), ("B", 1)]
    assert result.non_competing_results == [("C", 1)]


def test_placeholders_award_points_without_ranking() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    a_to_z = _build_contact(call="Z", time_on="1300")
    b_to_z = _build_contact(call="Z", time_on="1310")

    result = score_contest(
        [("A", [a_to_b, a_to_z]), ("B", [b_to_a, b_to_z])],
        _build_rules(
            validation=["default", ["minimumContacts", 1]],
            scoring=["default", ["minimumContacts", 2]],
            allowMissingParticipants=True,
        ),
    )

    assert result.results == [("A", 1), ("B", 1)]
    assert result.missing_participants == [("Z", 2)]
    contacts = result.scoring_details["A"].contacts
    assert (contacts[0].score_rule, contacts[0].given_score) == ("minimumContacts", 0)
    assert (contacts[1].score_rule, contacts[1].given_score) == ("default", 1)
    assert "Z" not in dict(result.results)
    assert "Z" not in result.scoring_details


def test_validation_minimum_contacts_scenario() -> None:
    result = score_contest(
        [
            ("A", [_build_contact(call="B")]),
            ("B", [_build_contact(call="A")]),
            ("C", [_build_contact(call="A", time_on="1300")]),
        ],
        _build_rules(validation=[["minimumContacts", 2]]),
    )

    assert result.results == [("A", 1)]
    assert result.scoring_details["B"].has_minimum_appearances is False
    assert result.scoring_details["B"].contacts[0].invalid_rule == "minimumContacts"


def test_tiebreakers_reorder_equal_scores() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    a_to_c, c_to_a = _reciprocal_pair("A", "C", time_on="1230")
    b_to_c, c_to_b = _reciprocal_pair("B", "C", time_on="1215")
    d_to_b, b_to_d = _reciprocal_pair("D", "B", time_on="1300")

    submissions = [
        ("A", [a_to_b, a_to_c]),
        ("B", [b_to_a, b_to_c, b_to_d]),
        ("C", [c_to_a, c_to_b]),
        ("D", [d_to_b]),
    ]

    untied = score_contest(submissions, _build_rules())
    tied = score_contest(submissions, _build_rules(tiebreaker=["minimumTime"]))

    assert untied.results == [("B", 3), ("A", 2), ("C", 2), ("D", 1)]
    assert tied.results == [("B", 3), ("C", 2), ("A", 2), ("D", 1)]


def test_duplicate_submissions_are_merged() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    a_to_c, c_to_a = _reciprocal_pair("A", "C", time_on="1300")

    result = score_contest(
        [("A", [a_to_b]), ("B", [b_to_a]), ("C", [c_to_a]), ("A", [a_to_c])],
        _build_rules(),
    )

    assert len(result.scoring_details["A"].contacts) == 2
    assert dict(result.results)["A"] == 2


def test_scoring_is_deterministic_and_leaves_input_untouched() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")
    submissions = [("A", [a_to_b]), ("B", [b_to_a])]
    original = copy.deepcopy(submissions)
    rules = _build_rules(tiebreaker=["validStations", "minimumTime"])

    first = score_contest(submissions, rules)
    second = score_contest(submissions, rules)

    assert submissions == original
    assert first.model_dump() == second.model_dump()


def test_invalid_rules_raise_before_scoring() -> None:
    with pytest.raises(ValueError, match="Invalid rules configuration"):
        score_contest([("A", [])], _build_rules(validation=["unknownRule"]))


def test_result_serializes_with_camel_case_keys() -> None:
    a_to_b, b_to_a = _reciprocal_pair("A", "B")

    result = score_contest([("A", [a_to_b]), ("B", [b_to_a])], _build_rules())
    payload = result.model_dump(mode="json", by_alias=True)

    assert set(payload) == {
        "results",
        "nonCompetingResults",
        "scoringDetails",
        "missingParticipants",
        "blacklistedCallsignsFound",
    }
    assert payload["results"] == [["A", 1.0], ["B", 1.0]]
    detail = payload["scoringDetails"]["A"]
    assert detail["hasMinimumAppearances"] is True
    assert detail["contacts"][0]["scoreRule"] == "default"
    assert ContestResult.model_validate(payload).model_dump() == result.model_dump()
