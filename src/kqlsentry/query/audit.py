"""Audit records for validation attempts.

One ``AuditLogEntry`` is built per validation attempt, valid or not, and
handed to an ``AuditSink``. The query fingerprint is a 32-bit rolling hash
meant for grouping repeated queries in logs; it is not a security control.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Protocol

from kqlsentry.core.types import AuditLogEntry, Dialect, ValidationResult

_MASK_32 = 0xFFFFFFFF


def hash_query(query: str) -> str:
    """Fingerprint a query as the hex magnitude of a signed 32-bit rolling hash.

    Computes ``h = h * 31 + c`` over UTF-16 code units, wrapping to a signed
    32-bit integer after every step.
    """
    encoded = query.encode("utf-16-le", errors="surrogatepass")
    value = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + code_unit) & _MASK_32
    if value & 0x80000000:
        value -= 1 << 32
    return format(abs(value), "x")


def build_audit_entry(
    query: str,
    dialect: Dialect | str,
    user_id: str,
    channel: str,
    validation_result: ValidationResult,
) -> AuditLogEntry:
    """Build the audit record for one validation attempt.

    Args:
        query: Raw query text as received
        dialect: Query dialect
        user_id: Caller identity
        channel: Surface the query came from (slack, teams, api, ...)
        validation_result: Verdict for the query

    Returns:
        Immutable AuditLogEntry
    """
    return AuditLogEntry(
        timestamp=datetime.now(UTC),
        query=query,
        dialect=Dialect.parse(dialect),
        query_hash=hash_query(query),
        query_length=len(query),
        user_id=user_id,
        channel=channel,
        valid=validation_result.valid,
        errors=list(validation_result.errors),
        warnings=list(validation_result.warnings),
    )


class AuditSink(Protocol):
    """Destination for audit records."""

    def record(self, entry: AuditLogEntry) -> None: ...


class LoggingAuditSink:
    """Writes each audit record as one JSON line on the ``kqlsentry.audit`` logger.

    Blocked attempts are logged at WARNING, everything else at INFO.
    """

    def __init__(self, audit_logger: logging.Logger | None = None) -> None:
        self._logger = audit_logger or logging.getLogger("kqlsentry.audit")

    def record(self, entry: AuditLogEntry) -> None:
        level = logging.INFO if entry.valid else logging.WARNING
        self._logger.log(level, json.dumps(entry.model_dump(mode="json")))


class InMemoryAuditSink:
    """Keeps audit records in a list."""

    def __init__(self) -> None:
        self.entries: list[AuditLogEntry] = []

    def record(self, entry: AuditLogEntry) -> None:
        self.entries.append(entry)
