"""Threat pattern scanning."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from kqlsentry.core.types import Severity
from kqlsentry.query.patterns import ThreatPattern

BLOCKED_MESSAGE = "Dangerous operation detected: {description}"


@dataclass
class ScanResult:
    """Messages produced by one scan, in pattern order."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def scan(
    text: str,
    patterns: Iterable[ThreatPattern],
    warning_prefix: str = "Potential injection pattern",
) -> ScanResult:
    """Evaluate every pattern against the whole text.

    There is no short-circuit: each matching pattern contributes one message,
    so a caller sees the complete list in one round trip.

    Args:
        text: Analysis view of the query (comments already stripped)
        patterns: Blocking and/or advisory patterns
        warning_prefix: Lead-in for advisory messages

    Returns:
        ScanResult with one error per blocking match and one warning per
        advisory match
    """
    result = ScanResult()
    for threat in patterns:
        if not threat.matches(text):
            continue
        if threat.severity == Severity.BLOCK:
            result.errors.append(BLOCKED_MESSAGE.format(description=threat.description))
        else:
            result.warnings.append(f"{warning_prefix}: {threat.description}")
    return result
