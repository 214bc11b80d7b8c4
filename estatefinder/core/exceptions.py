"""Estatefinder exception taxonomy.

Every custom exception inherits from :class:`EstateFinderError`.  Exceptions
are organised by architectural layer so callers can catch at the right
granularity:

    Layer hierarchy
    ---------------
    EstateFinderError
    ├── ConfigError
    └── ServiceError
        ├── ServiceFetchError
        ├── ServiceRateLimitError
        ├── ListingNotFoundError
        └── MalformedResponseError

Only the transport and service layers raise :class:`ServiceError`
subclasses.  The query executor converts them into outcomes, so nothing in
this module ever reaches the rendering layer.

Usage:

    from estatefinder.core.exceptions import ServiceFetchError

    raise ServiceFetchError("listing-api", "Connection refused") from exc
"""

from __future__ import annotations

import logging

__all__ = [
    "EstateFinderError",
    # Config
    "ConfigError",
    # Service
    "ServiceError",
    "ServiceFetchError",
    "ServiceRateLimitError",
    "ListingNotFoundError",
    "MalformedResponseError",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class EstateFinderError(Exception):
    """Root exception for all Estatefinder errors.

    Catch this to handle any application-level error uniformly.  Prefer
    catching layer-specific subclasses wherever possible.
    """


# ---------------------------------------------------------------------------
# Config layer
# ---------------------------------------------------------------------------


class ConfigError(EstateFinderError):
    """Raised when the application configuration is invalid or incomplete.

    Examples:
        - ``DISPLAY_TIMEZONE`` names an unknown IANA zone.
        - ``API_BASE_URL`` is blank.
    """


# ---------------------------------------------------------------------------
# Service layer
# ---------------------------------------------------------------------------


class ServiceError(EstateFinderError):
    """Base class for all listing-service errors.

    Args:
        service: Short label of the service (usually its base URL).
        message: Human-readable error description.
    """

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        super().__init__(f"[{service}] {message}")


class ServiceFetchError(ServiceError):
    """Raised when the listing service cannot be reached or answers non-2xx.

    Covers network errors, timeouts, and unexpected HTTP status codes.

    Args:
        service: Short label of the service.
        message: Human-readable error description.
        status_code: HTTP status code, if a response was received.
    """

    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(service, message)


class ServiceRateLimitError(ServiceError):
    """Raised when the service answers HTTP 429.

    Args:
        service: Short label of the service.
        retry_after: Recommended back-off interval in seconds, if known.
    """

    def __init__(self, service: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        detail = f"retry after {retry_after}s" if retry_after is not None else "no retry hint"
        super().__init__(service, f"Rate limited ({detail})")


class ListingNotFoundError(ServiceError):
    """Raised when a single-listing lookup answers HTTP 404.

    This is a *user-recoverable* condition distinct from a generic failure:
    the detail view offers a "browse all" affordance instead of a retry.

    Args:
        service: Short label of the service.
        listing_id: The identifier that had no matching record.
    """

    def __init__(self, service: str, listing_id: str) -> None:
        self.listing_id = listing_id
        super().__init__(service, f"Listing not found: {listing_id!r}")


class MalformedResponseError(ServiceError):
    """Raised when a response body does not match the expected envelope.

    Examples:
        - Body is not JSON.
        - ``success`` is missing or not a boolean.
        - ``data`` has the wrong shape for the request.

    An envelope that reports ``success: false`` raises plain
    :class:`ServiceError` instead.  Callers treat both like
    :class:`ServiceFetchError`.
    """

