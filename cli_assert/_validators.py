"""Shared validation helpers."""

from __future__ import annotations


def validate_exit_code(code: int) -> None:
    """Ensure *code* is a plain integer exit code."""
    if isinstance(code, bool) or not isinstance(code, int):
        msg = "exit code must be an integer"
        raise TypeError(msg)


def validate_match_count(count: int) -> None:
    """Ensure *count* is usable as an expected number of regex matches."""
    if isinstance(count, bool) or not isinstance(count, int):
        msg = "match count must be an integer"
        raise TypeError(msg)

    if count < 0:
        msg = "match count must be >= 0"
        raise ValueError(msg)
