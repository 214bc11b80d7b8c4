"""Query executor: criteria in, normalised outcome out.

:class:`QueryExecutor` issues a :class:`~estatefinder.core.criteria.FilterCriteria`
(or a single-id lookup) to a :class:`~estatefinder.providers.base.ListingService`
and folds every possible result into one of four :class:`OutcomeKind`
values:

=============  ==============================================================
``OK``         One or more usable records.
``EMPTY``      The service answered successfully with zero usable records.
               Not an error: "no matches" is a displayable state.
``NOT_FOUND``  A single-id lookup hit a missing listing (HTTP 404).
``FAILURE``    Network/server error, ``success: false``, or a malformed
               envelope.  The UI shows generic retry messaging.
=============  ==============================================================

Service exceptions never escape :meth:`QueryExecutor.search` or
:meth:`QueryExecutor.lookup`.  The executor does not cache.

Limit policy
------------
A non-positive ``limit`` is rejected client-side: it is logged with the
``LIMIT_REJECTED`` event and replaced by ``Settings.default_limit`` (which,
when ``0``, means "send no limit").  Collections longer than the effective
limit are truncated locally so a service that ignores ``limit`` still
yields at most that many results.

Record validation
-----------------
Each record inside a valid envelope is validated on its own.  A record that
fails validation, or that contradicts the requested location / category
criteria, is skipped with a ``RECORD_SKIPPED`` warning; the rest of the
batch survives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ValidationError

from estatefinder.core import events
from estatefinder.core.criteria import FilterCriteria
from estatefinder.core.exceptions import (
    ListingNotFoundError,
    MalformedResponseError,
    ServiceError,
)
from estatefinder.core.models import ListingDetail, ListingSummary
from estatefinder.providers.base import ListingService

__all__ = ["OutcomeKind", "QueryOutcome", "QueryExecutor"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Outcome types
# ---------------------------------------------------------------------------


class OutcomeKind(StrEnum):
    """Normalised result category of one executor call."""

    OK = "ok"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class QueryOutcome:
    """Immutable result of :meth:`QueryExecutor.search` / :meth:`QueryExecutor.lookup`.

    Attributes:
        kind: Result category.
        listings: Collection results (empty unless ``kind`` is ``OK`` for a
            search).
        listing: Detail result of a successful lookup.
        reason: Diagnostic text for ``NOT_FOUND`` / ``FAILURE``.
        skipped: Records dropped during validation.
    """

    kind: OutcomeKind
    listings: tuple[ListingSummary, ...] = ()
    listing: ListingDetail | None = None
    reason: str = ""
    skipped: int = 0

    @classmethod
    def failure(cls, reason: str) -> QueryOutcome:
        return cls(kind=OutcomeKind.FAILURE, reason=reason)

    @classmethod
    def not_found(cls, reason: str) -> QueryOutcome:
        return cls(kind=OutcomeKind.NOT_FOUND, reason=reason)

    @property
    def is_error(self) -> bool:
        """``True`` for ``NOT_FOUND`` and ``FAILURE``."""
        return self.kind in (OutcomeKind.NOT_FOUND, OutcomeKind.FAILURE)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class _Envelope(BaseModel):
    """The service's standard ``{success, data, message}`` wrapper."""

    success: bool
    data: Any = None
    message: str | None = None


def _open_envelope(body: Any, service: str) -> Any:
    """Return ``data`` from a successful envelope.

    Raises:
        MalformedResponseError: If *body* is not an envelope.
        ServiceError: If the envelope reports ``success: false``.
    """
    if not isinstance(body, dict):
        raise MalformedResponseError(service, f"expected a JSON object, got {type(body).__name__}")
    try:
        envelope = _Envelope.model_validate(body)
    except ValidationError as exc:
        raise MalformedResponseError(service, f"invalid envelope: {exc.error_count()} error(s)") from exc
    if not envelope.success:
        raise ServiceError(service, envelope.message or "service reported success=false")
    return envelope.data


def _collection_items(data: Any, service: str) -> list[Any]:
    """Extract the record list from collection ``data``.

    Accepts a bare list, the aggregated ``{"sales": [...], "total": n}``
    shape, or ``null`` (no records).
    """
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("sales"), list):
        return data["sales"]
    raise MalformedResponseError(service, f"collection data has unexpected type {type(data).__name__}")


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class QueryExecutor:
    """Run listing queries against a :class:`ListingService`.

    Args:
        service: The backend to query.
        default_limit: Limit applied when a caller passes ``None`` or a
            non-positive value.  ``0`` sends no limit.
        service_label: Label used in log lines and failure reasons.
    """

    def __init__(
        self,
        service: ListingService,
        *,
        default_limit: int = 0,
        service_label: str = "listing-service",
    ) -> None:
        if default_limit < 0:
            raise ValueError(f"default_limit must be ≥ 0, got {default_limit!r}")
        self._service = service
        self._default_limit = default_limit
        self._label = service_label

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_limit(self, limit: int | None) -> int | None:
        """Apply the limit policy; returns the limit to send, or ``None``."""
        fallback = self._default_limit or None
        if limit is None:
            return fallback
        if limit <= 0:
            logger.warning(
                "Rejected non-positive limit %d; using %s",
                limit,
                fallback if fallback is not None else "no limit",
                extra={"event": events.LIMIT_REJECTED},
            )
            return fallback
        return limit

    async def search(self, criteria: FilterCriteria, limit: int | None = None) -> QueryOutcome:
        """Query the listing collection.

        Args:
            criteria: Server-side constraints.
            limit: Maximum number of results; see the module docstring for
                the non-positive policy.

        Returns:
            An ``OK``, ``EMPTY`` or ``FAILURE`` outcome.  Never raises for
            service errors.
        """
        effective_limit = self.resolve_limit(limit)
        params = criteria.to_query_params(limit=effective_limit)
        logger.info(
            "Searching listings params=%s",
            params,
            extra={"event": events.QUERY_START},
        )

        try:
            body = await self._service.fetch_listings(params)
            items = _collection_items(_open_envelope(body, self._label), self._label)
        except MalformedResponseError as exc:
            return self._malformed(exc)
        except ServiceError as exc:
            return self._failed(exc)

        listings: list[ListingSummary] = []
        skipped = 0
        for index, item in enumerate(items):
            try:
                listing = ListingSummary.model_validate(item)
            except ValidationError as exc:
                skipped += 1
                logger.warning(
                    "Skipping invalid listing record #%d: %s",
                    index,
                    exc.errors()[0]["msg"] if exc.errors() else exc,
                    extra={"event": events.RECORD_SKIPPED},
                )
                continue
            passed, reason = criteria.matches_listing(listing)
            if not passed:
                skipped += 1
                logger.warning(
                    "Skipping listing %s outside requested criteria: %s",
                    listing.id,
                    reason,
                    extra={"event": events.RECORD_SKIPPED, "listing_id": listing.id},
                )
                continue
            listings.append(listing)

        if effective_limit is not None and len(listings) > effective_limit:
            logger.debug(
                "Service returned %d listings for limit %d; truncating",
                len(listings),
                effective_limit,
            )
            listings = listings[:effective_limit]

        if not listings:
            logger.info(
                "Search matched no listings (%d skipped)",
                skipped,
                extra={"event": events.QUERY_EMPTY},
            )
            return QueryOutcome(kind=OutcomeKind.EMPTY, skipped=skipped)

        logger.info(
            "Search returned %d listings (%d skipped)",
            len(listings),
            skipped,
            extra={"event": events.QUERY_OK},
        )
        return QueryOutcome(kind=OutcomeKind.OK, listings=tuple(listings), skipped=skipped)

    async def lookup(self, listing_id: str | int) -> QueryOutcome:
        """Fetch one listing's detail record.

        Returns:
            An ``OK``, ``NOT_FOUND`` or ``FAILURE`` outcome.  Never raises
            for service errors.
        """
        key = str(listing_id).strip()
        if not key:
            logger.info("Blank listing id", extra={"event": events.QUERY_NOT_FOUND})
            return QueryOutcome.not_found("blank listing id")

        logger.info("Looking up listing %s", key, extra={"event": events.QUERY_START})

        try:
            body = await self._service.fetch_listing(key)
            data = _open_envelope(body, self._label)
            if not isinstance(data, dict):
                raise MalformedResponseError(self._label, "detail data is not an object")
            try:
                listing = ListingDetail.model_validate(data)
            except ValidationError as exc:
                raise MalformedResponseError(
                    self._label, f"invalid listing record: {exc.error_count()} error(s)"
                ) from exc
        except ListingNotFoundError as exc:
            logger.info(
                "Listing %s not found",
                key,
                extra={"event": events.QUERY_NOT_FOUND, "listing_id": key},
            )
            return QueryOutcome.not_found(str(exc))
        except MalformedResponseError as exc:
            return self._malformed(exc)
        except ServiceError as exc:
            return self._failed(exc)

        logger.info(
            "Loaded listing %s", key, extra={"event": events.QUERY_OK, "listing_id": key}
        )
        return QueryOutcome(kind=OutcomeKind.OK, listing=listing)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _malformed(self, exc: MalformedResponseError) -> QueryOutcome:
        logger.warning(
            "Malformed response: %s",
            exc,
            extra={"event": events.RESPONSE_MALFORMED},
        )
        return QueryOutcome.failure(str(exc))

    def _failed(self, exc: ServiceError) -> QueryOutcome:
        logger.error(
            "Listing service failure: %s",
            exc,
            extra={"event": events.QUERY_FAILURE},
        )
        return QueryOutcome.failure(str(exc))
