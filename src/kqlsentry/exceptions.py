"""Custom exceptions for KQLSentry.

Validation itself never raises: a blocked query is an expected outcome and is
returned as data on ``ValidationResult``. These exceptions cover the outer
surfaces (gate, CLI, tools) where raising is the right way to stop:
- Actionable error messages that tell what went wrong AND how to fix it
- Include context about available options when relevant
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kqlsentry.core.types import ValidationResult


class KQLSentryError(Exception):
    """Base exception for all KQLSentry errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict for agent consumption."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class InvalidDialectError(KQLSentryError):
    """Unknown query dialect name."""

    VALID_DIALECTS = ["kql", "resourcegraph"]

    def __init__(self, dialect: str) -> None:
        message = f"Invalid dialect '{dialect}'. Valid dialects: {', '.join(self.VALID_DIALECTS)}"
        super().__init__(message, {"dialect": dialect, "valid_dialects": self.VALID_DIALECTS})
        self.dialect = dialect


class QueryRejectedError(KQLSentryError):
    """Query failed security validation and was not executed."""

    def __init__(self, result: ValidationResult) -> None:
        message = "Query failed security validation: " + "; ".join(result.errors)
        super().__init__(
            message,
            {
                "violations": list(result.errors),
                "warnings": list(result.warnings),
            },
        )
        self.result = result


class ExecutorNotConfiguredError(KQLSentryError):
    """No executor is available to run a validated query."""

    def __init__(self) -> None:
        super().__init__(
            "No query executor configured. Pass an Executor to QueryGate before running queries."
        )


class QueryExecutionError(KQLSentryError):
    """The executor failed to run a validated query."""

    VALID_CODES = [
        "QUERY_TIMEOUT",
        "QUERY_SYNTAX_ERROR",
        "RATE_LIMIT",
        "QUERY_EXECUTION_FAILED",
    ]

    def __init__(
        self,
        message: str,
        code: str = "QUERY_EXECUTION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        if code not in self.VALID_CODES:
            code = "QUERY_EXECUTION_FAILED"
        super().__init__(message, {"code": code, "details": details or {}})
        self.code = code
        self.details = details or {}
