"""CLI context management for guard policy and shared state."""

from dataclasses import dataclass, field

from kqlsentry import GuardPolicy, QueryValidator
from kqlsentry.core.types import Dialect


def get_policy() -> GuardPolicy:
    """Resolve the guard policy.

    Priority:
    1. KQLSENTRY_* environment variables
    2. Built-in defaults

    Per-command flags (``--no-time-filter``, ``--max-lookback-days``) are
    applied on top by the commands themselves.
    """
    return GuardPolicy.from_env()


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Holds the resolved policy and output preferences; validators are created
    lazily per dialect.
    """

    policy: GuardPolicy
    json_output: bool
    _validators: dict[Dialect, QueryValidator] = field(default_factory=dict, init=False, repr=False)

    def get_validator(self, dialect: Dialect) -> QueryValidator:
        """Get or create the validator for a dialect.

        Returns:
            QueryValidator configured from the policy
        """
        if dialect not in self._validators:
            self._validators[dialect] = QueryValidator.from_policy(dialect, self.policy)
        return self._validators[dialect]
