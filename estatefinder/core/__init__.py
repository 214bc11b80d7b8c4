"""Core domain models, criteria, settings, logging configuration, and exceptions."""

from estatefinder.core.criteria import FilterCriteria, SearchRequest, build_criteria
from estatefinder.core.exceptions import (
    ConfigError,
    EstateFinderError,
    ListingNotFoundError,
    MalformedResponseError,
    ServiceError,
    ServiceFetchError,
    ServiceRateLimitError,
)
from estatefinder.core.logging_config import JsonFormatter, configure_logging
from estatefinder.core.models import (
    DetailImage,
    ListingDetail,
    ListingImage,
    ListingSourceInfo,
    ListingSummary,
)
from estatefinder.core.settings import Settings, load_settings

__all__ = [
    # Logging
    "configure_logging",
    "JsonFormatter",
    # Domain models
    "ListingSummary",
    "ListingImage",
    "ListingSourceInfo",
    "ListingDetail",
    "DetailImage",
    # Settings
    "Settings",
    "load_settings",
    # Criteria
    "FilterCriteria",
    "SearchRequest",
    "build_criteria",
    # Exceptions
    "EstateFinderError",
    "ConfigError",
    "ServiceError",
    "ServiceFetchError",
    "ServiceRateLimitError",
    "ListingNotFoundError",
    "MalformedResponseError",
]
