"""Structured log event name constants for Estatefinder.

Every key transition in the discovery engine emits a log record with an
``event`` field (passed via ``extra={"event": events.X}``).  In
``LOG_FORMAT=json`` mode the value surfaces under the ``extra`` key of each
emitted object, so log queries can select e.g. every stale-response discard
without parsing message text.

Usage example::

    import logging
    from estatefinder.core import events

    logger = logging.getLogger(__name__)

    logger.info("Query started", extra={"event": events.QUERY_START})
"""

from __future__ import annotations

__all__ = [
    # Query lifecycle
    "QUERY_START",
    "QUERY_OK",
    "QUERY_EMPTY",
    "QUERY_NOT_FOUND",
    "QUERY_FAILURE",
    "LIMIT_REJECTED",
    # Response handling
    "RESPONSE_MALFORMED",
    "RESPONSE_STALE",
    "RECORD_SKIPPED",
    # Data quality
    "SCHEDULE_INVALID",
]

# ---------------------------------------------------------------------------
# Query lifecycle
# ---------------------------------------------------------------------------

#: Emitted when the executor issues a request to the listing service.
QUERY_START: str = "QUERY_START"

#: The service answered with one or more usable records.
QUERY_OK: str = "QUERY_OK"

#: The service answered successfully with zero usable records.
QUERY_EMPTY: str = "QUERY_EMPTY"

#: A single-listing lookup answered 404.
QUERY_NOT_FOUND: str = "QUERY_NOT_FOUND"

#: Network, server, or envelope failure; surfaced as a retryable error.
QUERY_FAILURE: str = "QUERY_FAILURE"

#: A non-positive result limit was replaced by the configured default.
LIMIT_REJECTED: str = "LIMIT_REJECTED"

# ---------------------------------------------------------------------------
# Response handling
# ---------------------------------------------------------------------------

#: The response body did not match the ``{success, data}`` envelope.
RESPONSE_MALFORMED: str = "RESPONSE_MALFORMED"

#: A response arrived after a newer request superseded it; discarded.
RESPONSE_STALE: str = "RESPONSE_STALE"

#: One record inside a valid envelope failed validation or did not match
#: the requested criteria; skipped while the rest of the batch survives.
RECORD_SKIPPED: str = "RECORD_SKIPPED"

# ---------------------------------------------------------------------------
# Data quality
# ---------------------------------------------------------------------------

#: A listing's end timestamp is not strictly after its start timestamp.
SCHEDULE_INVALID: str = "SCHEDULE_INVALID"
