"""Guarded execution: validate, audit, bound, then hand off to an executor."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from kqlsentry.core.config import GuardPolicy
from kqlsentry.core.types import (
    Dialect,
    ExecutionOptions,
    QueryOutcome,
    ValidationOptions,
    ValidationResult,
)
from kqlsentry.exceptions import (
    ExecutorNotConfiguredError,
    QueryExecutionError,
    QueryRejectedError,
)
from kqlsentry.query.audit import AuditSink, LoggingAuditSink, build_audit_entry
from kqlsentry.query.execution import apply_result_limit, clamp_options
from kqlsentry.query.validator import QueryValidator

logger = logging.getLogger(__name__)


class Executor(Protocol):
    """Runs a validated query against a backend.

    Implementations perform the network call and return rows; failures should
    be raised as ``QueryExecutionError`` with one of its codes.
    """

    def execute(
        self, query: str, dialect: Dialect, options: ExecutionOptions
    ) -> QueryOutcome: ...


class QueryGate:
    """The only path from generated query text to an executor.

    Every attempt is validated and audited. Invalid queries never reach the
    executor; valid ones run with bounded options.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        audit_sink: AuditSink | None = None,
        policy: GuardPolicy | None = None,
    ) -> None:
        """Initialize the gate.

        Args:
            executor: Backend executor (required for run/run_or_raise)
            audit_sink: Destination for audit records (logs by default)
            policy: Limits and defaults (GuardPolicy() when not provided)
        """
        self._executor = executor
        self._audit_sink = audit_sink or LoggingAuditSink()
        self._policy = policy or GuardPolicy()
        self._validators = {
            dialect: QueryValidator.from_policy(dialect, self._policy) for dialect in Dialect
        }

    @property
    def policy(self) -> GuardPolicy:
        """Policy applied by this gate."""
        return self._policy

    def validate(
        self,
        query: str,
        dialect: Dialect | str = Dialect.KQL,
        user_id: str = "unknown",
        channel: str = "api",
        options: ValidationOptions | None = None,
    ) -> ValidationResult:
        """Validate a query and record the attempt in the audit sink."""
        dialect = Dialect.parse(dialect)
        options = options or self._policy.validation_options(dialect)
        result = self._validators[dialect].validate(query, options)
        self._audit_sink.record(build_audit_entry(query, dialect, user_id, channel, result))
        return result

    def execution_options(
        self, max_results: int | None = None, timeout_ms: int | None = None
    ) -> ExecutionOptions:
        """Clamp requested options with this gate's policy."""
        return clamp_options(
            max_results,
            timeout_ms,
            default_max_results=self._policy.default_max_results,
            max_results_limit=self._policy.max_results_limit,
            default_timeout_ms=self._policy.default_timeout_ms,
            max_timeout_ms=self._policy.max_timeout_ms,
        )

    def run(
        self,
        query: str,
        dialect: Dialect | str = Dialect.KQL,
        user_id: str = "unknown",
        channel: str = "api",
        max_results: int | None = None,
        timeout_ms: int | None = None,
        options: ValidationOptions | None = None,
    ) -> QueryOutcome:
        """Validate and, when allowed, execute a query.

        Args:
            query: Raw query text from the model
            dialect: Query dialect
            user_id: Caller identity for the audit record
            channel: Surface the query came from
            max_results: Requested row count (clamped)
            timeout_ms: Requested timeout (clamped)
            options: Validation options (derived from the policy when omitted)

        Returns:
            QueryOutcome; failed outcomes carry an error code and message

        Raises:
            ExecutorNotConfiguredError: If the gate has no executor
        """
        start_time = time.perf_counter()
        dialect = Dialect.parse(dialect)
        validation = self.validate(query, dialect, user_id, channel, options)

        if not validation.valid:
            return QueryOutcome(
                success=False,
                error="QUERY_VALIDATION_FAILED",
                message="Query failed security validation",
                violations=validation.errors,
                warnings=validation.warnings,
                execution_time_ms=_elapsed_ms(start_time),
            )

        return self._execute(validation, dialect, max_results, timeout_ms, start_time)

    def run_or_raise(
        self,
        query: str,
        dialect: Dialect | str = Dialect.KQL,
        user_id: str = "unknown",
        channel: str = "api",
        max_results: int | None = None,
        timeout_ms: int | None = None,
        options: ValidationOptions | None = None,
    ) -> QueryOutcome:
        """Like ``run`` but raise instead of returning failed outcomes.

        Raises:
            QueryRejectedError: If validation blocks the query
            QueryExecutionError: If the executor fails
            ExecutorNotConfiguredError: If the gate has no executor
        """
        start_time = time.perf_counter()
        dialect = Dialect.parse(dialect)
        validation = self.validate(query, dialect, user_id, channel, options)
        if not validation.valid:
            raise QueryRejectedError(validation)

        outcome = self._execute(validation, dialect, max_results, timeout_ms, start_time)
        if not outcome.success:
            raise QueryExecutionError(
                outcome.message or "Query execution failed",
                code=outcome.error or "QUERY_EXECUTION_FAILED",
            )
        return outcome

    def _execute(
        self,
        validation: ValidationResult,
        dialect: Dialect,
        max_results: int | None,
        timeout_ms: int | None,
        start_time: float,
    ) -> QueryOutcome:
        if validation.sanitized_query is None:
            raise QueryRejectedError(validation)
        if self._executor is None:
            raise ExecutorNotConfiguredError()

        exec_options = self.execution_options(max_results, timeout_ms)
        final_query = validation.sanitized_query
        if dialect == Dialect.KQL:
            final_query = apply_result_limit(final_query, exec_options.max_results)

        try:
            outcome = self._executor.execute(final_query, dialect, exec_options)
        except QueryExecutionError as e:
            logger.error(f"{dialect} execution failed ({e.code}): {e.message}")
            return QueryOutcome(
                success=False,
                query=final_query,
                error=e.code,
                message=e.message,
                warnings=validation.warnings,
                execution_time_ms=_elapsed_ms(start_time),
            )
        except Exception as e:
            logger.exception(f"{dialect} execution failed")
            return QueryOutcome(
                success=False,
                query=final_query,
                error="QUERY_EXECUTION_FAILED",
                message=str(e),
                warnings=validation.warnings,
                execution_time_ms=_elapsed_ms(start_time),
            )

        rows = outcome.rows[: exec_options.max_results]
        return outcome.model_copy(
            update={
                "query": final_query,
                "rows": rows,
                "row_count": outcome.row_count or len(outcome.rows),
                "truncated": outcome.truncated or len(outcome.rows) > exec_options.max_results,
                "warnings": validation.warnings + outcome.warnings,
                "execution_time_ms": _elapsed_ms(start_time),
            }
        )


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000
