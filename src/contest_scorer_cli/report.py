from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from pathlib import Path

from contest_scorer.schemas import CallsignCount, ContestResult, ParticipantScoringDetail, ScoreRow

CSV_HEADERS = ("Rank", "Callsign", "Score")


def write_results_csv(path: Path, result: ContestResult) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_HEADERS)
        for rank, (callsign, score) in enumerate(result.results, start=1):
            writer.writerow([rank, callsign, format_score(score)])
    return path


def write_result_json(path: Path, result: ContestResult) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json", by_alias=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def format_score(score: float) -> str:
    return f"{score:g}"


def render_results_table(rows: Sequence[ScoreRow]) -> str:
    if not rows:
        return "no results"
    headers = ("rank", "callsign", "score")
    line_rows = [
        (str(rank), callsign, format_score(score))
        for rank, (callsign, score) in enumerate(rows, start=1)
    ]
    return _render_table(headers=headers, rows=line_rows)


def render_counts_table(rows: Sequence[CallsignCount]) -> str:
    if not rows:
        return "none"
    headers = ("callsign", "appearances")
    return _render_table(
        headers=headers,
        rows=[(callsign, str(count)) for callsign, count in rows],
    )


def render_detail_table(callsign: str, detail: ParticipantScoringDetail) -> str:
    headers = ("#", "call", "date", "time", "band", "mode", "invalid", "rule", "score")
    line_rows = [
        (
            str(index),
            _truncate(entry.contact.get("call", "") or "-", limit=16),
            entry.contact.get("qso_date", "") or "-",
            entry.contact.get("time_on", "") or "-",
            entry.contact.get("band", "") or "-",
            entry.contact.get("mode", "") or "-",
            entry.invalid_rule or "-",
            entry.score_rule or "-",
            format_score(entry.given_score),
        )
        for index, entry in enumerate(detail.contacts, start=1)
    ]
    bonus = detail.bonus_rule_applied or "-"
    title = (
        f"{callsign} valid={detail.valid_contact_count}/{len(detail.contacts)} "
        f"bonus={bonus}({format_score(detail.given_bonus)}) "
        f"minimum_appearances={'yes' if detail.has_minimum_appearances else 'no'}"
    )
    return f"{title}\n{_render_table(headers=headers, rows=line_rows)}"


def _render_table(
    *,
    headers: tuple[str, ...],
    rows: list[tuple[str, ...]],
) -> str:
    if not rows:
        return "no rows"

    widths = [
        max(len(headers[column]), *(len(row[column]) for row in rows))
        for column in range(len(headers))
    ]

    def _line(values: tuple[str, ...]) -> str:
        return " | ".join(value.ljust(widths[index]) for index, value in enumerate(values))

    divider = "-+-".join("-" * width for width in widths)
    body = [_line(headers), divider]
    body.extend(_line(row) for row in rows)
    return "\n".join(body)


def _truncate(text: str, *, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."
