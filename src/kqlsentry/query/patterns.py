"""Threat pattern and whitelist tables.

These tables are built once at import and never mutated. ``QueryValidator``
takes them as constructor defaults, so alternates can be injected per
validator instead of patching module state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from kqlsentry.core.types import Severity


@dataclass(frozen=True)
class ThreatPattern:
    """A compiled pattern with the verdict its match produces."""

    pattern: re.Pattern[str]
    description: str
    severity: Severity

    def matches(self, text: str) -> bool:
        """Whether the pattern occurs anywhere in the text."""
        return self.pattern.search(text) is not None


def _block(regex: str, description: str) -> ThreatPattern:
    return ThreatPattern(re.compile(regex, re.IGNORECASE), description, Severity.BLOCK)


def _warn(regex: str, description: str) -> ThreatPattern:
    return ThreatPattern(re.compile(regex, re.IGNORECASE), description, Severity.WARN)


# Tables the analytics dialect may start a query from
ALLOWED_KQL_TABLES: tuple[str, ...] = (
    "Perf",
    "Heartbeat",
    "AzureDiagnostics",
    "InsightsMetrics",
    "VMProcess",
    "VMConnection",
    "VMBoundPort",
    "Event",
    "Syslog",
    "AzureMetrics",
)

# Root collections a resource graph query may start from
ALLOWED_RESOURCE_GRAPH_ROOTS: tuple[str, ...] = (
    "Resources",
    "ResourceContainers",
    "AdvisorResources",
    "AlertsManagementResources",
)

# Resource types query generators may filter on
ALLOWED_RESOURCE_TYPES: tuple[str, ...] = (
    "microsoft.compute/virtualmachines",
    "microsoft.compute/virtualmachinescalesets",
    "microsoft.compute/disks",
    "microsoft.network/networkinterfaces",
    "microsoft.network/publicipaddresses",
    "microsoft.network/virtualnetworks",
    "microsoft.storage/storageaccounts",
    "microsoft.resources/subscriptions",
    "microsoft.resources/resourcegroups",
)

# Keyword that starts a binding rather than a table reference
BINDING_KEYWORD = "let"

# Control commands and functions that modify data or run code
KQL_BLOCKING_PATTERNS: tuple[ThreatPattern, ...] = (
    _block(r"\.delete\b", "delete operation"),
    _block(r"\.set\s+", "set operation"),
    _block(r"\.append\s+", "append operation"),
    _block(r"\.ingest\s+", "ingest operation"),
    _block(r"\.create\s+", "create operation"),
    _block(r"\.alter\s+", "alter operation"),
    _block(r"\.drop\s+", "drop operation"),
    _block(r"\.execute\s+", "execute plugin (code execution)"),
    _block(r"external_data\s*\(", "external data access"),
    _block(r"\.set-or-append\s+", "set-or-append operation"),
    _block(r"\.set-or-replace\s+", "set-or-replace operation"),
    _block(r"materialize\s*\(", "materialize (resource intensive)"),
    _block(r"\bunion\s+\*", "unrestricted union (security risk)"),
)

KQL_ADVISORY_PATTERNS: tuple[ThreatPattern, ...] = (
    _warn(r"'\s*;\s*", "quote followed by semicolon"),
    _warn(r"'\s*\|\s*union\s", "quote followed by union"),
    _warn(r"\bunion\s+\*", "unrestricted union"),
    _warn(r"\bprint\s+", "print command"),
    _warn(r"toscalar\s*\([^)]*getschema", "schema exfiltration"),
    _warn(r";\s*\w+\s*\|", "multiple statements"),
)

# Write-looking verbs; the resource graph API itself is read-only
RESOURCE_GRAPH_BLOCKING_PATTERNS: tuple[ThreatPattern, ...] = (
    _block(r"\bupdate\s+", "update operation"),
    _block(r"\bdelete\s+", "delete operation"),
    _block(r"\binsert\s+", "insert operation"),
    _block(r"\bmodify\s+", "modify operation"),
)

RESOURCE_GRAPH_ADVISORY_PATTERNS: tuple[ThreatPattern, ...] = (
    _warn(r";\s*\w+", "multiple statements"),
    _warn(r"union\s+\*", "unrestricted union"),
)

# Columns and functions that make up a time filter
TIME_COLUMN_PATTERN = re.compile(r"TimeGenerated|_TimeReceived|timestamp", re.IGNORECASE)
TIME_FUNCTION_PATTERN = re.compile(r"ago\s*\(|between\s*\(|datetime\s*\(", re.IGNORECASE)
AGO_PATTERN = re.compile(r"ago\s*\(\s*(\d+)\s*([dhms])\s*\)", re.IGNORECASE)
