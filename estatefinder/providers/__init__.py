"""Listing-service backends consumed by the discovery engine."""

from estatefinder.providers.base import ListingService
from estatefinder.providers.http_client import ListingHttpClient
from estatefinder.providers.http_service import HttpListingService

__all__ = ["ListingService", "ListingHttpClient", "HttpListingService"]
