"""Command-line collaborators: ADIF logs in, CSV and JSON results out."""

from .adif import parse_adif
from .loader import callsign_for, find_log_files, load_submissions
from .report import (
    render_counts_table,
    render_detail_table,
    render_results_table,
    write_result_json,
    write_results_csv,
)

__all__ = [
    "callsign_for",
    "find_log_files",
    "load_submissions",
    "parse_adif",
    "render_counts_table",
    "render_detail_table",
    "render_results_table",
    "write_result_json",
    "write_results_csv",
]
