"""Process-wide guard configuration."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from kqlsentry.core.types import Dialect, ValidationOptions

_TRUE_VALUES = {"1", "true", "yes", "on"}


class GuardPolicy(BaseModel):
    """Limits and defaults applied by the validator and the execution gate."""

    # Validation
    kql_max_query_length: int = Field(default=10000, gt=0)
    resource_graph_max_query_length: int = Field(default=5000, gt=0)
    require_time_filter: bool = True
    max_lookback_days: float | None = None  # None disables the ago() window check

    # Execution
    default_max_results: int = 1000
    max_results_limit: int = 10000
    default_timeout_ms: int = 60000
    max_timeout_ms: int = 300000  # 5 minutes

    extra_kql_tables: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def max_query_length(self, dialect: Dialect) -> int:
        """Maximum raw query length for a dialect."""
        if dialect == Dialect.RESOURCE_GRAPH:
            return self.resource_graph_max_query_length
        return self.kql_max_query_length

    def validation_options(self, dialect: Dialect) -> ValidationOptions:
        """Build per-call validation options from this policy."""
        return ValidationOptions(
            require_time_filter=self.require_time_filter,
            max_query_length=self.max_query_length(dialect),
            max_lookback_days=self.max_lookback_days,
        )

    @classmethod
    def from_env(cls) -> GuardPolicy:
        """Build a policy from KQLSENTRY_* environment variables.

        Unset variables keep their defaults.
        """
        overrides: dict[str, object] = {}
        if (value := os.getenv("KQLSENTRY_REQUIRE_TIME_FILTER")) is not None:
            overrides["require_time_filter"] = value.strip().lower() in _TRUE_VALUES
        if value := os.getenv("KQLSENTRY_MAX_LOOKBACK_DAYS"):
            overrides["max_lookback_days"] = float(value)
        if value := os.getenv("KQLSENTRY_KQL_MAX_LENGTH"):
            overrides["kql_max_query_length"] = int(value)
        if value := os.getenv("KQLSENTRY_RG_MAX_LENGTH"):
            overrides["resource_graph_max_query_length"] = int(value)
        if value := os.getenv("KQLSENTRY_EXTRA_TABLES"):
            overrides["extra_kql_tables"] = [t.strip() for t in value.split(",") if t.strip()]
        return cls(**overrides)
