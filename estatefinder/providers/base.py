"""Listing-service contract consumed by the discovery engine.

The backend listing store is an external collaborator.  The engine only
needs two operations from it, each returning the *raw decoded* response
body (the ``{"success": ..., "data": ...}`` envelope).  Parsing and
normalising that envelope is the query executor's job, so alternative
backends (HTTP, fixtures, a local cache) only have to move bytes.

Implementations must raise from the
:mod:`~estatefinder.core.exceptions` service taxonomy:

* :class:`~estatefinder.core.exceptions.ListingNotFoundError` when a
  single-listing lookup has no match.
* :class:`~estatefinder.core.exceptions.MalformedResponseError` when the
  body cannot be decoded at all.
* :class:`~estatefinder.core.exceptions.ServiceFetchError` (or a subclass)
  for every other failure.

Typical usage::

    from estatefinder.providers.base import ListingService

    class FixtureService(ListingService):
        async def fetch_listings(self, params):
            return {"success": True, "data": []}

        async def fetch_listing(self, listing_id):
            raise ListingNotFoundError("fixtures", listing_id)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

__all__ = ["ListingService"]

logger = logging.getLogger(__name__)


class ListingService(ABC):
    """Abstract base for listing-service backends.

    The async context manager protocol is provided for free; override
    :meth:`close` to release resources.
    """

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by this service.  No-op by default."""

    async def __aenter__(self) -> ListingService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Core contract
    # ------------------------------------------------------------------

    @abstractmethod
    async def fetch_listings(self, params: dict[str, Any]) -> Any:
        """Query the listing collection.

        Args:
            params: Query parameters as produced by
                :meth:`~estatefinder.core.criteria.FilterCriteria.to_query_params`.

        Returns:
            The decoded response body.
        """

    @abstractmethod
    async def fetch_listing(self, listing_id: str) -> Any:
        """Look up one listing by id.

        Returns:
            The decoded response body.

        Raises:
            ListingNotFoundError: When no listing has this id.
        """
