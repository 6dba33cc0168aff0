"""Tests for pattern scanning, whitelist checks and structural policy."""

from __future__ import annotations

import re

import pytest

from kqlsentry.core.types import Severity
from kqlsentry.query.gatekeeper import (
    check_kql_table,
    check_resource_graph_root,
    extract_first_table,
    extract_first_token,
)
from kqlsentry.query.patterns import (
    ALLOWED_KQL_TABLES,
    ALLOWED_RESOURCE_GRAPH_ROOTS,
    KQL_ADVISORY_PATTERNS,
    KQL_BLOCKING_PATTERNS,
    RESOURCE_GRAPH_ADVISORY_PATTERNS,
    RESOURCE_GRAPH_BLOCKING_PATTERNS,
    ThreatPattern,
)
from kqlsentry.query.policy import check_time_range, has_multiple_statements, has_time_filter
from kqlsentry.query.scanner import scan


class TestPatternTables:
    """Built-in tables."""

    def test_blocking_tables_block(self) -> None:
        """Blocking tables only hold BLOCK patterns."""
        for threat in KQL_BLOCKING_PATTERNS + RESOURCE_GRAPH_BLOCKING_PATTERNS:
            assert threat.severity == Severity.BLOCK

    def test_advisory_tables_warn(self) -> None:
        """Advisory tables only hold WARN patterns."""
        for threat in KQL_ADVISORY_PATTERNS + RESOURCE_GRAPH_ADVISORY_PATTERNS:
            assert threat.severity == Severity.WARN

    def test_patterns_ignore_case(self) -> None:
        """Every built-in pattern is case-insensitive."""
        for threat in KQL_BLOCKING_PATTERNS + KQL_ADVISORY_PATTERNS:
            assert threat.pattern.flags & re.IGNORECASE

    def test_whitelists(self) -> None:
        """The built-in whitelists hold the expected names."""
        assert len(ALLOWED_KQL_TABLES) == 10
        assert "Perf" in ALLOWED_KQL_TABLES
        assert ALLOWED_RESOURCE_GRAPH_ROOTS[0] == "Resources"


class TestScan:
    """Threat pattern scanning."""

    def test_every_match_reported_in_order(self) -> None:
        """No short-circuit; messages follow pattern order."""
        result = scan(".drop table T | union *", KQL_BLOCKING_PATTERNS)

        assert result.errors == [
            "Dangerous operation detected: drop operation",
            "Dangerous operation detected: unrestricted union (security risk)",
        ]
        assert result.warnings == []

    def test_warning_prefix(self) -> None:
        """Advisory messages use the given prefix."""
        result = scan("Resources | union *", RESOURCE_GRAPH_ADVISORY_PATTERNS, "Suspicious pattern")

        assert result.warnings == ["Suspicious pattern: unrestricted union"]

    def test_mixed_severities(self) -> None:
        """One scan can produce both errors and warnings."""
        patterns = [
            ThreatPattern(re.compile("alpha"), "alpha", Severity.BLOCK),
            ThreatPattern(re.compile("beta"), "beta", Severity.WARN),
        ]

        result = scan("alpha beta", patterns)

        assert result.errors == ["Dangerous operation detected: alpha"]
        assert result.warnings == ["Potential injection pattern: beta"]

    def test_clean_text(self) -> None:
        """Nothing matches a plain query."""
        result = scan("Perf | take 10", KQL_BLOCKING_PATTERNS + KQL_ADVISORY_PATTERNS)

        assert result.errors == []
        assert result.warnings == []


class TestFirstTable:
    """Table extraction."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Perf | take 1", "Perf"),
            ("   Heartbeat|count", "Heartbeat"),
            ("Perf", "Perf"),
            ("Perf\n| take 1", "Perf"),
            (".show tables", None),
            ("", None),
            ("union T,\nPerf", None),
            ("(Perf) | take 1", None),
        ],
    )
    def test_extract_first_table(self, text: str, expected: str | None) -> None:
        """The first bare identifier before a pipe or line end is the table."""
        assert extract_first_table(text) == expected

    def test_extract_first_token(self) -> None:
        """Tokens split on whitespace."""
        assert extract_first_token("  Resources | take 1") == "Resources"
        assert extract_first_token("") == ""

    def test_allowed_table(self) -> None:
        """Whitelisted tables pass in any case."""
        assert check_kql_table("PERF | take 1", ALLOWED_KQL_TABLES) is None

    def test_binding_prefix_skipped(self) -> None:
        """Identifiers starting with let are not checked."""
        assert check_kql_table("letters | take 1", ["Perf"]) is None

    def test_leading_word_checked(self) -> None:
        """Without a bare leading table the first word is checked."""
        error = check_kql_table("print 1", ["Perf"])
        assert error == "Table 'print' is not in the allowed list. Allowed tables: Perf"

        error = check_kql_table("(SecurityEvent) | take 1", ["Perf"])
        assert error is not None
        assert "'SecurityEvent'" in error

        assert check_kql_table("(Perf) | take 1", ["Perf"]) is None

    def test_later_lines_ignored(self) -> None:
        """Only the first line can name the table."""
        error = check_kql_table("union SecurityEvent,\nPerf | take 1", ["Perf"])
        assert error is not None
        assert "'union'" in error

    def test_let_statement_skipped(self) -> None:
        """A leading let statement is not checked."""
        assert check_kql_table("let x = Perf; x", ["Perf"]) is None

    def test_dash_comments_ignored(self) -> None:
        """-- comments are dropped before the table is read."""
        assert check_kql_table("-- SecurityEvent\nPerf | take 1", ["Perf"]) is None
        assert check_kql_table("Perf -- note\n| take 1", ["Perf"]) is None

    def test_no_words(self) -> None:
        """Text without any word has no table to check."""
        assert check_kql_table("  ", ["Perf"]) is None
        assert check_kql_table("-- note", ["Perf"]) is None

    def test_unknown_table_message(self) -> None:
        """The message names the table and the whitelist."""
        error = check_kql_table("Foo | take 1", ["Perf", "Event"])

        assert error == "Table 'Foo' is not in the allowed list. Allowed tables: Perf, Event"

    def test_resource_graph_root(self) -> None:
        """The first token must be a root collection."""
        assert check_resource_graph_root("resources | take 1", ALLOWED_RESOURCE_GRAPH_ROOTS) is None
        error = check_resource_graph_root("Disks | take 1", ALLOWED_RESOURCE_GRAPH_ROOTS)
        assert error is not None
        assert error.startswith("Query must start with a valid resource table.")


class TestTimeFilter:
    """Time filter heuristic."""

    @pytest.mark.parametrize(
        "text",
        [
            "Perf | where TimeGenerated > ago(1h)",
            "Perf | where timestamp between (datetime(2024-01-01) .. now())",
            "Perf | where _TimeReceived > datetime(2024-01-01)",
        ],
    )
    def test_detected(self, text: str) -> None:
        """A time column with a boundary function counts as a filter."""
        assert has_time_filter(text)

    @pytest.mark.parametrize(
        "text",
        ["Perf | take 1", "Perf | project TimeGenerated", "Perf | where x > ago(1h)"],
    )
    def test_not_detected(self, text: str) -> None:
        """Either part alone is not enough."""
        assert not has_time_filter(text)


class TestMultipleStatements:
    """Statement separator detection."""

    def test_separator_inside_literal(self) -> None:
        """Separators in literals do not count."""
        assert not has_multiple_statements("Perf | where a == 'x;y'")

    def test_separator_outside_literal(self) -> None:
        """A bare separator counts."""
        assert has_multiple_statements("Perf; Heartbeat")

    def test_between_literals(self) -> None:
        """A separator between two literals counts."""
        assert has_multiple_statements("print 'a';'b'")


class TestTimeRange:
    """ago() look-back measurement."""

    def test_longest_lookback_wins(self) -> None:
        """Every ago() call is measured."""
        check = check_time_range("Perf | where TimeGenerated between (ago(7d) .. ago(36h))", 10)

        assert check.valid
        assert check.max_days_found == pytest.approx(7.0)
        assert check.message is None

    def test_minutes_and_seconds(self) -> None:
        """Smaller units convert to fractions of a day."""
        assert check_time_range("ago(90m)", 1).max_days_found == pytest.approx(90 / 1440)
        assert check_time_range("ago(3600s)", 1).max_days_found == pytest.approx(1 / 24)

    def test_over_limit(self) -> None:
        """Exceeding the limit produces a message."""
        check = check_time_range("Perf | where TimeGenerated > ago( 30 D )", 10)

        assert not check.valid
        assert check.limit == 10
        assert check.message is not None
        assert "(30.0 days) exceeds limit of 10 days" in check.message

    def test_no_ago(self) -> None:
        """Queries without ago() pass and report nothing found."""
        check = check_time_range("Perf | take 1", 1)

        assert check.valid
        assert check.max_days_found is None
