"""Structural policy checks: time filters, look-back windows, statement count."""

from __future__ import annotations

from kqlsentry.core.types import TimeRangeCheck
from kqlsentry.query.normalizer import remove_string_literals
from kqlsentry.query.patterns import AGO_PATTERN, TIME_COLUMN_PATTERN, TIME_FUNCTION_PATTERN

MULTI_STATEMENT_MESSAGE = "Multiple statements detected. Only single queries are allowed."
NO_TIME_FILTER_MESSAGE = (
    "Query does not appear to include a time filter. "
    "This may result in slow execution or excessive data."
)
EMPTY_QUERY_MESSAGE = "Query is empty"
TOO_LONG_MESSAGE = "Query exceeds maximum length of {limit} characters"

# Days per ago() unit
_UNIT_DAYS = {
    "d": 1.0,
    "h": 1.0 / 24,
    "m": 1.0 / (24 * 60),
    "s": 1.0 / (24 * 60 * 60),
}


def has_time_filter(text: str) -> bool:
    """Heuristic: a time column and a time-boundary function both appear."""
    return bool(TIME_COLUMN_PATTERN.search(text)) and bool(TIME_FUNCTION_PATTERN.search(text))


def has_multiple_statements(text: str) -> bool:
    """Whether a statement separator appears outside single-quoted literals."""
    if ";" not in text:
        return False
    return ";" in remove_string_literals(text)


def check_time_range(text: str, max_days: float) -> TimeRangeCheck:
    """Check every ``ago(<n><unit>)`` look-back against a limit in days.

    Queries without ago() calls pass; other time functions are not measured.
    """
    longest = 0.0
    for match in AGO_PATTERN.finditer(text):
        days = int(match.group(1)) * _UNIT_DAYS[match.group(2).lower()]
        longest = max(longest, days)

    valid = longest <= max_days
    return TimeRangeCheck(
        valid=valid,
        max_days_found=longest or None,
        limit=max_days,
        message=None
        if valid
        else (
            f"Query time range ({longest:.1f} days) exceeds limit of {max_days:g} days. "
            "Use the long-term analysis service for longer look-backs."
        ),
    )
