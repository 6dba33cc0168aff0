"""Execution option bounds and result limiting."""

from __future__ import annotations

import re

from kqlsentry.core.types import ExecutionOptions

DEFAULT_MAX_RESULTS = 1000
MAX_RESULTS_LIMIT = 10000
DEFAULT_TIMEOUT_MS = 60000  # 1 minute
MAX_TIMEOUT_MS = 300000  # 5 minutes

_RESULT_LIMIT_PATTERN = re.compile(r"\|\s*(?:take|limit)\s", re.IGNORECASE)


def clamp_options(
    max_results: int | None = None,
    timeout_ms: int | None = None,
    *,
    default_max_results: int = DEFAULT_MAX_RESULTS,
    max_results_limit: int = MAX_RESULTS_LIMIT,
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    max_timeout_ms: int = MAX_TIMEOUT_MS,
) -> ExecutionOptions:
    """Bound caller-requested execution options.

    Missing, zero or negative values fall back to the defaults; everything is
    then capped at the ceilings. Positive values below the default pass
    through unchanged.

    Args:
        max_results: Requested row count
        timeout_ms: Requested timeout in milliseconds

    Returns:
        ExecutionOptions within the ceilings
    """
    return ExecutionOptions(
        max_results=min(_positive_or(max_results, default_max_results), max_results_limit),
        timeout_ms=min(_positive_or(timeout_ms, default_timeout_ms), max_timeout_ms),
    )


def _positive_or(value: int | None, default: int) -> int:
    if value is None or value <= 0:
        return default
    return int(value)


def has_result_limit(query: str) -> bool:
    """Whether the query already pipes into ``take`` or ``limit``."""
    return _RESULT_LIMIT_PATTERN.search(query) is not None


def apply_result_limit(query: str, max_results: int) -> str:
    """Append ``| take <max_results>`` unless the query already limits rows."""
    if has_result_limit(query):
        return query
    return f"{query}\n| take {max_results}"
