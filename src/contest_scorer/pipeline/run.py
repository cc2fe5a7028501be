from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from time import perf_counter
from typing import Any

from contest_scorer.config import RulesConfig, parse_rules
from contest_scorer.context import build_rule_context
from contest_scorer.ranking import assemble_result
from contest_scorer.schemas import ContestResult, Submission
from contest_scorer.scoring import apply_bonus_rules, score_contacts
from contest_scorer.validation import validate_contacts

logger = logging.getLogger(__name__)


def score_contest(
    submissions: Iterable[Submission],
    rules: RulesConfig | Mapping[str, Any],
) -> ContestResult:
    """Validate, score and rank every submitted log under ``rules``.

    A mapping is validated as a rules configuration first; an invalid one
    raises ``ValueError`` before any contact is looked at.
    """
    config = parse_rules(rules)
    started_at = perf_counter()

    rule_context = build_rule_context(config)
    outcome = validate_contacts(submissions, rule_context)
    stage_started = _log_stage("validate", started_at)

    scoring_context = score_contacts(
        outcome.valid_contacts,
        rule_context,
        outcome.scoring_details,
        outcome.appearance_counts,
    )
    stage_started = _log_stage("score", stage_started)

    totals = apply_bonus_rules(scoring_context, rule_context, outcome.scoring_details)
    stage_started = _log_stage("bonus", stage_started)

    result = assemble_result(
        totals=totals,
        scored=outcome.valid_contacts,
        rule_context=rule_context,
        scoring_details=outcome.scoring_details,
        missing_participants=outcome.missing_participants,
        blacklisted_found=outcome.blacklisted_found,
    )
    _log_stage("rank", stage_started)

    logger.info(
        "contest scored name=%s ranked=%s non_competing=%s seconds=%.3f",
        config.name,
        len(result.results),
        len(result.non_competing_results),
        perf_counter() - started_at,
    )
    return result


def _log_stage(name: str, stage_started: float) -> float:
    now = perf_counter()
    logger.debug("stage finished stage=%s seconds=%.3f", name, now - stage_started)
    return now
