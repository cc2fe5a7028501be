"""End-to-end contest scoring."""

from .run import score_contest

__all__ = ["score_contest"]
