"""Ranking, tiebreaking and result assembly."""

from .assembler import assemble_result, sorted_counts, split_results
from .tiebreaker import apply_tiebreakers

__all__ = [
    "apply_tiebreakers",
    "assemble_result",
    "sorted_counts",
    "split_results",
]
