"""Shared test fixtures for KQLSentry."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from kqlsentry import (
    Dialect,
    ExecutionOptions,
    InMemoryAuditSink,
    QueryGate,
    QueryOutcome,
    QueryValidator,
)


class FakeExecutor:
    """Executor double that records calls and returns canned rows."""

    def __init__(
        self,
        rows: list[dict] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.rows = rows if rows is not None else [{"Computer": "vm-01", "CounterValue": 42.0}]
        self.error = error
        self.calls: list[tuple[str, Dialect, ExecutionOptions]] = []

    def execute(self, query: str, dialect: Dialect, options: ExecutionOptions) -> QueryOutcome:
        self.calls.append((query, dialect, options))
        if self.error is not None:
            raise self.error
        columns = list(self.rows[0].keys()) if self.rows else []
        return QueryOutcome(success=True, columns=columns, rows=list(self.rows))


@pytest.fixture
def kql_validator() -> QueryValidator:
    """Analytics validator with the built-in tables and patterns."""
    return QueryValidator(Dialect.KQL)


@pytest.fixture
def rg_validator() -> QueryValidator:
    """Resource graph validator with the built-in roots and patterns."""
    return QueryValidator(Dialect.RESOURCE_GRAPH)


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    """Audit sink that keeps entries in memory."""
    return InMemoryAuditSink()


@pytest.fixture
def executor() -> FakeExecutor:
    """Executor double returning one row."""
    return FakeExecutor()


@pytest.fixture
def make_executor() -> type[FakeExecutor]:
    """Executor double class for tests that need custom rows or failures."""
    return FakeExecutor


@pytest.fixture
def gate(executor: FakeExecutor, audit_sink: InMemoryAuditSink) -> QueryGate:
    """Gate wired to the fake executor and in-memory audit sink."""
    return QueryGate(executor=executor, audit_sink=audit_sink)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch, None, None]:
    """Remove KQLSENTRY_* variables so defaults apply."""
    for name in (
        "KQLSENTRY_REQUIRE_TIME_FILTER",
        "KQLSENTRY_MAX_LOOKBACK_DAYS",
        "KQLSENTRY_KQL_MAX_LENGTH",
        "KQLSENTRY_RG_MAX_LENGTH",
        "KQLSENTRY_EXTRA_TABLES",
    ):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
