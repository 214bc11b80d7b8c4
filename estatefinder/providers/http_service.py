"""HTTP-backed :class:`~estatefinder.providers.base.ListingService`.

Talks to the platform's REST endpoints:

``GET /api/sales``
    Collection query.  Accepts ``city``, ``state``, ``zip_code``,
    ``sale_type``, ``featured``, ``start_date``, ``end_date``, ``limit`` and
    ``offset`` query parameters.

``GET /api/sales/{id}``
    Single-listing lookup.  Answers 404 when no listing has the id.

Typical usage::

    from estatefinder.core.settings import Settings
    from estatefinder.providers.http_service import HttpListingService

    async with HttpListingService.from_settings(Settings()) as service:
        body = await service.fetch_listings({"state": "OR"})
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from estatefinder.core.exceptions import (
    ListingNotFoundError,
    MalformedResponseError,
    ServiceFetchError,
)
from estatefinder.core.settings import Settings
from estatefinder.providers.base import ListingService
from estatefinder.providers.http_client import ListingHttpClient

__all__ = ["HttpListingService"]

logger = logging.getLogger(__name__)

_COLLECTION_PATH: str = "/api/sales"


class HttpListingService(ListingService):
    """Listing service reached over HTTP.

    Args:
        http_client: The client to send requests with.
        owns_client: When ``True`` (the default) :meth:`close` also closes
            *http_client*.  Pass ``False`` when sharing a client.
    """

    def __init__(self, http_client: ListingHttpClient, *, owns_client: bool = True) -> None:
        self._http = http_client
        self._owns_http = owns_client

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpListingService:
        """Build a service with a private client configured from *settings*."""
        client = ListingHttpClient(
            base_url=settings.api_base_url,
            connect_timeout=settings.api_connect_timeout,
            read_timeout=settings.api_read_timeout,
            max_attempts=settings.api_max_attempts,
        )
        return cls(client)

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()

    # ------------------------------------------------------------------
    # ListingService interface
    # ------------------------------------------------------------------

    async def fetch_listings(self, params: dict[str, Any]) -> Any:
        response = await self._http.get(_COLLECTION_PATH, params=params or None)
        return self._decode(response)

    async def fetch_listing(self, listing_id: str) -> Any:
        path = f"{_COLLECTION_PATH}/{quote(listing_id, safe='')}"
        try:
            response = await self._http.get(path)
        except ServiceFetchError as exc:
            if exc.status_code == 404:
                raise ListingNotFoundError(self._http.label, listing_id) from exc
            raise
        return self._decode(response)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                self._http.label,
                f"response body is not JSON: {response.text[:120]!r}",
            ) from exc
