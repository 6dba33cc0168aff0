"""Query validator for LLM-generated analytics and resource graph queries.

Validates and sanitizes queries before execution to ensure:
- Data-modifying commands and code execution are blocked
- Queries start from a whitelisted table or root collection
- Only a single statement is sent
- Comments are stripped from what the executor runs

Validation never raises. Failures come back as data on ``ValidationResult``
so the caller (or the model that wrote the query) can correct and retry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from kqlsentry.core.config import GuardPolicy
from kqlsentry.core.types import (
    Dialect,
    TimeRangeCheck,
    ValidationOptions,
    ValidationRequest,
    ValidationResult,
    ViolationKind,
)
from kqlsentry.query.gatekeeper import check_kql_table, check_resource_graph_root
from kqlsentry.query.normalizer import sanitize_query, strip_comments
from kqlsentry.query.patterns import (
    ALLOWED_KQL_TABLES,
    ALLOWED_RESOURCE_GRAPH_ROOTS,
    KQL_ADVISORY_PATTERNS,
    KQL_BLOCKING_PATTERNS,
    RESOURCE_GRAPH_ADVISORY_PATTERNS,
    RESOURCE_GRAPH_BLOCKING_PATTERNS,
    ThreatPattern,
)
from kqlsentry.query.policy import (
    EMPTY_QUERY_MESSAGE,
    MULTI_STATEMENT_MESSAGE,
    NO_TIME_FILTER_MESSAGE,
    TOO_LONG_MESSAGE,
    check_time_range,
    has_multiple_statements,
    has_time_filter,
)
from kqlsentry.query.scanner import scan

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUERY_LENGTH = {
    Dialect.KQL: 10000,
    Dialect.RESOURCE_GRAPH: 5000,
}

_WARNING_PREFIX = {
    Dialect.KQL: "Potential injection pattern",
    Dialect.RESOURCE_GRAPH: "Suspicious pattern",
}


@dataclass
class _Findings:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    violations: list[ViolationKind] = field(default_factory=list)
    time_range: TimeRangeCheck | None = None

    def error(self, kind: ViolationKind, message: str) -> None:
        self.errors.append(message)
        if kind not in self.violations:
            self.violations.append(kind)

    def warning(self, kind: ViolationKind, message: str) -> None:
        self.warnings.append(message)
        if kind not in self.violations:
            self.violations.append(kind)


class QueryValidator:
    """Validates LLM-generated queries for one dialect.

    Provides multiple layers of protection:
    1. Empty and over-long queries are rejected outright
    2. Dangerous command and function patterns are blocked
    3. The first table (or root collection) must be whitelisted
    4. Statement separators outside string literals are blocked
    5. Injection-looking patterns and missing time filters raise warnings

    The whitelist and pattern tables default to the module constants and can
    be replaced per instance.
    """

    def __init__(
        self,
        dialect: Dialect | str = Dialect.KQL,
        allowed_tables: Iterable[str] | None = None,
        blocking_patterns: Iterable[ThreatPattern] | None = None,
        advisory_patterns: Iterable[ThreatPattern] | None = None,
        max_query_length: int | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            dialect: Query dialect this validator checks
            allowed_tables: Whitelisted tables (analytics) or root collections
                (resource graph); defaults to the built-in list
            blocking_patterns: Patterns whose match invalidates a query
            advisory_patterns: Patterns whose match only adds a warning
            max_query_length: Default length limit when options do not set one
        """
        self._dialect = Dialect.parse(dialect)
        is_kql = self._dialect == Dialect.KQL

        if allowed_tables is None:
            allowed_tables = ALLOWED_KQL_TABLES if is_kql else ALLOWED_RESOURCE_GRAPH_ROOTS
        if blocking_patterns is None:
            blocking_patterns = KQL_BLOCKING_PATTERNS if is_kql else RESOURCE_GRAPH_BLOCKING_PATTERNS
        if advisory_patterns is None:
            advisory_patterns = KQL_ADVISORY_PATTERNS if is_kql else RESOURCE_GRAPH_ADVISORY_PATTERNS

        self._allowed_tables = tuple(allowed_tables)
        self._blocking_patterns = tuple(blocking_patterns)
        self._advisory_patterns = tuple(advisory_patterns)
        if max_query_length is None:
            max_query_length = DEFAULT_MAX_QUERY_LENGTH[self._dialect]
        elif max_query_length <= 0:
            raise ValueError("max_query_length must be positive")
        self._max_query_length = max_query_length

    @classmethod
    def from_policy(cls, dialect: Dialect | str, policy: GuardPolicy) -> QueryValidator:
        """Create a validator configured from a guard policy."""
        dialect = Dialect.parse(dialect)
        allowed_tables: tuple[str, ...] | None = None
        if dialect == Dialect.KQL and policy.extra_kql_tables:
            allowed_tables = ALLOWED_KQL_TABLES + tuple(policy.extra_kql_tables)
        return cls(
            dialect,
            allowed_tables=allowed_tables,
            max_query_length=policy.max_query_length(dialect),
        )

    @property
    def dialect(self) -> Dialect:
        """Dialect this validator checks."""
        return self._dialect

    @property
    def allowed_tables(self) -> tuple[str, ...]:
        """Whitelisted tables or root collections."""
        return self._allowed_tables

    def validate(
        self,
        query: str,
        options: ValidationOptions | None = None,
    ) -> ValidationResult:
        """Validate a query.

        Args:
            query: Raw query text
            options: Per-call options (time filter, length, look-back limit)

        Returns:
            ValidationResult; ``sanitized_query`` is set only when valid
        """
        options = options or ValidationOptions()

        if not query or not query.strip():
            return self._rejected(ViolationKind.REJECTED_EMPTY, EMPTY_QUERY_MESSAGE)

        max_length = (
            options.max_query_length
            if options.max_query_length is not None
            else self._max_query_length
        )
        if len(query) > max_length:
            return self._rejected(
                ViolationKind.REJECTED_TOO_LONG, TOO_LONG_MESSAGE.format(limit=max_length)
            )

        # Analysis view: comments replaced by spaces, original text untouched
        analysis_view = strip_comments(query)

        findings = _Findings()
        self._check_blocking(analysis_view, options, findings)
        self._check_advisory(analysis_view, options, findings)

        sanitized: str | None = None
        if not findings.errors:
            sanitized = sanitize_query(query, strip_dash_comments=self._dialect == Dialect.KQL)
            if not sanitized:
                findings.error(
                    ViolationKind.REJECTED_EMPTY, f"{EMPTY_QUERY_MESSAGE} after removing comments"
                )
                sanitized = None
            else:
                # Removing comments joins the text around them; the executable
                # text must pass the same blocking checks as the analysis view.
                self._check_blocking(sanitized, options, findings)
                if findings.errors:
                    logger.warning(
                        f"Sanitized {self._dialect} query failed blocking checks "
                        "that the analysis view passed"
                    )
                    sanitized = None

        if findings.errors:
            logger.debug(f"Blocked {self._dialect} query: {findings.errors}")

        return ValidationResult(
            valid=not findings.errors,
            errors=findings.errors,
            warnings=findings.warnings,
            sanitized_query=sanitized,
            violations=findings.violations,
            time_range=findings.time_range,
        )

    def _rejected(self, kind: ViolationKind, message: str) -> ValidationResult:
        return ValidationResult(valid=False, errors=[message], violations=[kind])

    def _check_blocking(
        self,
        text: str,
        options: ValidationOptions,
        findings: _Findings,
    ) -> None:
        """Run the checks that invalidate a query.

        Args:
            text: Comment-free query text
            options: Per-call options
            findings: Accumulator for messages
        """
        for message in scan(text, self._blocking_patterns).errors:
            findings.error(ViolationKind.BLOCKED_OPERATION, message)

        if self._dialect == Dialect.KQL:
            table_error = check_kql_table(text, self._allowed_tables)
        else:
            table_error = check_resource_graph_root(text, self._allowed_tables)
        if table_error:
            findings.error(ViolationKind.BLOCKED_TABLE, table_error)

        if options.max_lookback_days is not None and self._dialect == Dialect.KQL:
            time_range = check_time_range(text, options.max_lookback_days)
            findings.time_range = time_range
            if not time_range.valid and time_range.message:
                findings.error(ViolationKind.BLOCKED_TIME_RANGE, time_range.message)

        if has_multiple_statements(text):
            findings.error(ViolationKind.BLOCKED_MULTI_STATEMENT, MULTI_STATEMENT_MESSAGE)

    def _check_advisory(
        self,
        text: str,
        options: ValidationOptions,
        findings: _Findings,
    ) -> None:
        """Run the checks that only produce warnings."""
        prefix = _WARNING_PREFIX[self._dialect]
        for message in scan(text, self._advisory_patterns, warning_prefix=prefix).warnings:
            findings.warning(ViolationKind.ADVISORY_INJECTION_PATTERN, message)

        if (
            self._dialect == Dialect.KQL
            and options.require_time_filter
            and not has_time_filter(text)
        ):
            findings.warning(ViolationKind.ADVISORY_NO_TIME_FILTER, NO_TIME_FILTER_MESSAGE)


def validate_kql_query(
    query: str,
    options: ValidationOptions | None = None,
) -> ValidationResult:
    """Convenience function to validate an analytics query.

    Args:
        query: KQL query to validate
        options: Validation options

    Returns:
        ValidationResult
    """
    return QueryValidator(Dialect.KQL).validate(query, options)


def validate_resource_graph_query(
    query: str,
    options: ValidationOptions | None = None,
) -> ValidationResult:
    """Convenience function to validate a resource graph query.

    Args:
        query: Resource graph query to validate
        options: Validation options

    Returns:
        ValidationResult
    """
    return QueryValidator(Dialect.RESOURCE_GRAPH).validate(query, options)


def validate_request(request: ValidationRequest) -> ValidationResult:
    """Validate a request with the built-in tables for its dialect."""
    return QueryValidator(request.dialect).validate(request.raw_query, request.options)
