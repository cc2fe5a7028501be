from __future__ import annotations

import logging
from pathlib import Path

from contest_scorer.schemas import Submission

from .adif import parse_adif

logger = logging.getLogger(__name__)

LOG_SUFFIXES = frozenset({".adi", ".adif"})


def find_log_files(directory: Path) -> list[Path]:
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in LOG_SUFFIXES
    )


def callsign_for(path: Path) -> str:
    return path.stem.strip().upper()


def load_submissions(directory: Path) -> tuple[list[Submission], list[str]]:
    """Read every ADIF log in ``directory``.

    Returns the submissions and the names of files that could not be read.
    Files without records are skipped.
    """
    submissions: list[Submission] = []
    failed: list[str] = []
    for path in find_log_files(directory):
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            logger.exception("failed to read log path=%s", path)
            failed.append(path.name)
            continue

        records = parse_adif(content)
        if not records:
            logger.warning("log has no records path=%s", path)
            continue
        submissions.append((callsign_for(path), records))

    logger.info("logs loaded submissions=%s failed=%s", len(submissions), len(failed))
    return submissions, failed
