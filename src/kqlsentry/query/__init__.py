"""Validation and sanitization of LLM-generated queries.

Architecture:
    1. Normalizer - Analysis view without comments; sanitized executable text
    2. Scanner - Blocking and advisory threat patterns
    3. Gatekeeper - First table / root collection whitelist
    4. Policy - Time filter, look-back window, statement separators
    5. Validator - Runs the above and returns a ValidationResult
    6. Escaping, execution bounds and audit records for the surrounding layers

Example:
    result = validate_kql_query("Perf | where TimeGenerated > ago(1h) | take 10")
    if result.valid:
        run(result.sanitized_query)
"""

from kqlsentry.query.audit import (
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    build_audit_entry,
    hash_query,
)
from kqlsentry.query.escaping import escape_value
from kqlsentry.query.execution import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_TIMEOUT_MS,
    MAX_RESULTS_LIMIT,
    MAX_TIMEOUT_MS,
    apply_result_limit,
    clamp_options,
)
from kqlsentry.query.patterns import (
    ALLOWED_KQL_TABLES,
    ALLOWED_RESOURCE_GRAPH_ROOTS,
    ALLOWED_RESOURCE_TYPES,
    ThreatPattern,
)
from kqlsentry.query.validator import (
    DEFAULT_MAX_QUERY_LENGTH,
    QueryValidator,
    validate_kql_query,
    validate_request,
    validate_resource_graph_query,
)

__all__ = [
    "ALLOWED_KQL_TABLES",
    "ALLOWED_RESOURCE_GRAPH_ROOTS",
    "ALLOWED_RESOURCE_TYPES",
    "DEFAULT_MAX_QUERY_LENGTH",
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_TIMEOUT_MS",
    "MAX_RESULTS_LIMIT",
    "MAX_TIMEOUT_MS",
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "QueryValidator",
    "ThreatPattern",
    "apply_result_limit",
    "build_audit_entry",
    "clamp_options",
    "escape_value",
    "hash_query",
    "validate_kql_query",
    "validate_request",
    "validate_resource_graph_query",
]
