"""Core types and configuration for KQLSentry."""

from kqlsentry.core.config import GuardPolicy
from kqlsentry.core.types import (
    AuditLogEntry,
    Dialect,
    ExecutionOptions,
    QueryOutcome,
    Severity,
    TimeRangeCheck,
    ValidationOptions,
    ValidationRequest,
    ValidationResult,
    ViolationKind,
)

__all__ = [
    "AuditLogEntry",
    "Dialect",
    "ExecutionOptions",
    "GuardPolicy",
    "QueryOutcome",
    "Severity",
    "TimeRangeCheck",
    "ValidationOptions",
    "ValidationRequest",
    "ValidationResult",
    "ViolationKind",
]
