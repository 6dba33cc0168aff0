"""Core types for KQLSentry.

All types are designed to be JSON-serializable for agent and audit consumption.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from kqlsentry.exceptions import InvalidDialectError


class Dialect(StrEnum):
    """Query languages the validator understands."""

    KQL = "kql"  # Log analytics (Perf, Heartbeat, ...)
    RESOURCE_GRAPH = "resourcegraph"  # Inventory (Resources, ResourceContainers, ...)

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid dialect values."""
        return [d.value for d in cls]

    @classmethod
    def parse(cls, value: str | Dialect) -> Dialect:
        """Resolve a dialect from a user-supplied name.

        Raises:
            InvalidDialectError: If the name is not a known dialect
        """
        if isinstance(value, Dialect):
            return value
        normalized = value.strip().lower().replace("-", "").replace("_", "")
        for dialect in cls:
            if dialect.value == normalized:
                return dialect
        raise InvalidDialectError(value)


class Severity(StrEnum):
    """How a threat pattern match affects the verdict."""

    BLOCK = "block"  # Match invalidates the query
    WARN = "warn"  # Match is reported only


class ViolationKind(StrEnum):
    """Classes of validation findings."""

    REJECTED_EMPTY = "rejected_empty"
    REJECTED_TOO_LONG = "rejected_too_long"
    BLOCKED_OPERATION = "blocked_operation"
    BLOCKED_TABLE = "blocked_table"
    BLOCKED_MULTI_STATEMENT = "blocked_multi_statement"
    BLOCKED_TIME_RANGE = "blocked_time_range"
    ADVISORY_INJECTION_PATTERN = "advisory_injection_pattern"
    ADVISORY_NO_TIME_FILTER = "advisory_no_time_filter"

    @property
    def blocking(self) -> bool:
        """Whether findings of this kind invalidate the query."""
        return not self.value.startswith("advisory_")


class ValidationOptions(BaseModel):
    """Per-call validation options."""

    require_time_filter: bool = Field(
        default=True, description="Warn when an analytics query has no time filter"
    )
    max_query_length: int | None = Field(
        default=None, gt=0, description="Maximum raw query length (dialect default when unset)"
    )
    max_lookback_days: float | None = Field(
        default=None, description="Block ago() look-backs longer than this many days"
    )

    model_config = {"frozen": True}


class ValidationRequest(BaseModel):
    """A single validation attempt."""

    raw_query: str
    dialect: Dialect = Dialect.KQL
    options: ValidationOptions = Field(default_factory=ValidationOptions)

    model_config = {"frozen": True}


class TimeRangeCheck(BaseModel):
    """Outcome of the ago() look-back check."""

    valid: bool
    max_days_found: float | None = None
    limit: float
    message: str | None = None


class ValidationResult(BaseModel):
    """Result of query validation.

    ``sanitized_query`` is set if and only if ``errors`` is empty; it is the
    only text an executor may run.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    sanitized_query: str | None = None
    violations: list[ViolationKind] = Field(default_factory=list)
    time_range: TimeRangeCheck | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> ValidationResult:
        if self.valid == bool(self.errors):
            raise ValueError("valid must be True exactly when errors is empty")
        if (self.sanitized_query is not None) != self.valid:
            raise ValueError("sanitized_query must be present exactly when valid")
        return self


class AuditLogEntry(BaseModel):
    """One record per validation attempt."""

    timestamp: datetime
    query: str
    dialect: Dialect
    query_hash: str
    query_length: int
    user_id: str
    channel: str
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ExecutionOptions(BaseModel):
    """Bounded execution options handed to an executor."""

    max_results: int
    timeout_ms: int

    model_config = {"frozen": True}


class QueryOutcome(BaseModel):
    """What a guarded execution returns to the bot or API layer."""

    success: bool
    query: str | None = None
    columns: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0
    truncated: bool = False
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None  # QUERY_VALIDATION_FAILED, QUERY_TIMEOUT, ...
    message: str | None = None
    violations: list[str] = Field(default_factory=list)
    execution_time_ms: float = 0.0
