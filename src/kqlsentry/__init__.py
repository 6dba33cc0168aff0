"""KQLSentry - Security gate for LLM-generated analytics queries.

Validates and sanitizes KQL and resource graph queries written by an AI agent
before they reach a live backend: dangerous commands are blocked, the first
table must be whitelisted, stray statement separators are rejected, comments
are stripped, and every attempt produces an audit record.

Example:
    from kqlsentry import QueryGate, validate_kql_query

    result = validate_kql_query("Perf | where TimeGenerated > ago(1h) | take 10")
    if result.valid:
        print(result.sanitized_query)
    else:
        print(result.errors)

    # Or route everything through a gate with your own executor
    gate = QueryGate(executor=MyLogAnalyticsExecutor())
    outcome = gate.run(query, dialect="kql", user_id="U123", channel="slack")
"""

from kqlsentry.core.config import GuardPolicy
from kqlsentry.core.gate import Executor, QueryGate
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
from kqlsentry.exceptions import (
    ExecutorNotConfiguredError,
    InvalidDialectError,
    KQLSentryError,
    QueryExecutionError,
    QueryRejectedError,
)
from kqlsentry.query import (
    ALLOWED_KQL_TABLES,
    ALLOWED_RESOURCE_GRAPH_ROOTS,
    ALLOWED_RESOURCE_TYPES,
    DEFAULT_MAX_QUERY_LENGTH,
    DEFAULT_MAX_RESULTS,
    DEFAULT_TIMEOUT_MS,
    MAX_RESULTS_LIMIT,
    MAX_TIMEOUT_MS,
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    QueryValidator,
    ThreatPattern,
    apply_result_limit,
    build_audit_entry,
    clamp_options,
    escape_value,
    hash_query,
    validate_kql_query,
    validate_request,
    validate_resource_graph_query,
)
from kqlsentry.tools import ToolDefinition, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "QueryValidator",
    "QueryGate",
    "Executor",
    "validate_kql_query",
    "validate_resource_graph_query",
    "validate_request",
    "escape_value",
    "clamp_options",
    "apply_result_limit",
    "build_audit_entry",
    "hash_query",
    # Types
    "Dialect",
    "Severity",
    "ViolationKind",
    "ValidationOptions",
    "ValidationRequest",
    "ValidationResult",
    "TimeRangeCheck",
    "AuditLogEntry",
    "ExecutionOptions",
    "QueryOutcome",
    "ThreatPattern",
    "GuardPolicy",
    # Audit sinks
    "AuditSink",
    "LoggingAuditSink",
    "InMemoryAuditSink",
    # Constants
    "ALLOWED_KQL_TABLES",
    "ALLOWED_RESOURCE_GRAPH_ROOTS",
    "ALLOWED_RESOURCE_TYPES",
    "DEFAULT_MAX_QUERY_LENGTH",
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_TIMEOUT_MS",
    "MAX_RESULTS_LIMIT",
    "MAX_TIMEOUT_MS",
    # Tools
    "ToolDefinition",
    "ToolRegistry",
    # Exceptions
    "KQLSentryError",
    "InvalidDialectError",
    "QueryRejectedError",
    "ExecutorNotConfiguredError",
    "QueryExecutionError",
]
