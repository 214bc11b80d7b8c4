"""Query execution against the external listing service."""

from estatefinder.discovery.executor import OutcomeKind, QueryExecutor, QueryOutcome

__all__ = ["OutcomeKind", "QueryExecutor", "QueryOutcome"]
