"""Shared pytest fixtures and configuration for the Estatefinder test suite.

This file is loaded automatically by pytest before any test module.
It provides project-wide fixtures and payload factories used across unit
and integration tests.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any

import pytest
from pydantic_settings import SettingsConfigDict

from estatefinder.core import configure_logging
from estatefinder.core.exceptions import ListingNotFoundError
from estatefinder.core.settings import Settings
from estatefinder.providers.base import ListingService

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _configure_test_logging() -> None:
    """Force DEBUG logging in text format for every test.

    Using ``force=True`` ensures the configuration is applied even when
    pytest's own ``log_cli`` handler is already present.
    """
    configure_logging(level="DEBUG", fmt="text", force=True)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove Estatefinder env vars for the duration of a test.

    Also disables pydantic-settings ``.env`` file loading so values in a
    developer's local ``.env`` do not leak into Settings isolation tests.
    """
    prefixes = (
        "API_",
        "DEFAULT_LIMIT",
        "DISPLAY_TIMEZONE",
        "MAPS_BASE_URL",
        "DETAIL_ROUTE_PREFIX",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "ESTATEFINDER_",
    )
    for key in list(os.environ):
        if any(key.upper().startswith(prefix) for prefix in prefixes):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setattr(
        Settings,
        "model_config",
        SettingsConfigDict(
            env_file=None,
            env_file_encoding="utf-8",
            extra="ignore",
        ),
    )


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------


def _summary_payload(**overrides: Any) -> dict[str, Any]:
    """Return a valid collection record as the service would send it."""
    payload: dict[str, Any] = {
        "id": "1",
        "title": "Vintage Estate Sale",
        "address": "123 Main St",
        "city": "Portland",
        "state": "OR",
        "zip_code": "97201",
        "description": "Mid-century furniture and tools",
        "start_date": "2025-11-01T09:00:00Z",
        "end_date": "2025-11-01T16:00:00Z",
        "thumbnail_url": None,
        "images": [],
        "is_scraped": False,
        "sale_type": "estate_sale",
    }
    payload.update(overrides)
    return payload


def _detail_payload(**overrides: Any) -> dict[str, Any]:
    """Return a valid single-listing record as the service would send it."""
    payload: dict[str, Any] = {
        "id": 42,
        "seller_id": 7,
        "title": "Vintage Estate Sale",
        "description": "Mid-century furniture and tools",
        "sale_type": "estate_sale",
        "status": "published",
        "address_line1": "123 Main St",
        "address_line2": None,
        "city": "Portland",
        "state": "OR",
        "zip_code": "97201",
        "latitude": None,
        "longitude": None,
        "start_date": "2025-11-01T09:00:00Z",
        "end_date": "2025-11-01T16:00:00Z",
        "listing_tier": "basic",
        "view_count": 12,
        "featured": False,
        "created_at": "2025-10-20T12:00:00Z",
        "images": [],
    }
    payload.update(overrides)
    return payload


def _envelope(data: Any, *, success: bool = True, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "data": data}
    if message is not None:
        body["message"] = message
    return body


# ---------------------------------------------------------------------------
# Fake listing service
# ---------------------------------------------------------------------------


class FakeListingService(ListingService):
    """In-memory :class:`ListingService` returning canned bodies.

    Attributes:
        collection_body: Returned from :meth:`fetch_listings` unless
            *collection_error* is set.
        details: Map of id to body returned from :meth:`fetch_listing`.
            Unknown ids raise :class:`ListingNotFoundError`.
        gates: Optional map of listing id to :class:`asyncio.Event`; a
            lookup for that id waits on its event before answering.
        collection_gates: Events consumed one per collection query; a
            query that pops an event waits on it, then answers with the
            body (or error) that was configured when it arrived.
        calls: Every params dict / id received, in order.
    """

    def __init__(
        self,
        collection_body: Any = None,
        *,
        details: dict[str, Any] | None = None,
        collection_error: Exception | None = None,
        detail_error: Exception | None = None,
    ) -> None:
        self.collection_body = collection_body if collection_body is not None else _envelope([])
        self.details = details or {}
        self.collection_error = collection_error
        self.detail_error = detail_error
        self.gates: dict[str, asyncio.Event] = {}
        self.collection_gates: list[asyncio.Event] = []
        self.calls: list[Any] = []
        self.closed = False

    async def close(self) -> None:
        self.closed = True

    async def fetch_listings(self, params: dict[str, Any]) -> Any:
        self.calls.append(dict(params))
        body, error = self.collection_body, self.collection_error
        if self.collection_gates:
            await self.collection_gates.pop(0).wait()
        if error is not None:
            raise error
        return body

    async def fetch_listing(self, listing_id: str) -> Any:
        self.calls.append(listing_id)
        gate = self.gates.get(listing_id)
        if gate is not None:
            await gate.wait()
        if self.detail_error is not None:
            raise self.detail_error
        if listing_id not in self.details:
            raise ListingNotFoundError("fake", listing_id)
        return self.details[listing_id]


@pytest.fixture()
def summary_payload() -> Callable[..., dict[str, Any]]:
    """Factory fixture: ``summary_payload(title="...")`` returns a record dict."""
    return _summary_payload


@pytest.fixture()
def detail_payload() -> Callable[..., dict[str, Any]]:
    """Factory fixture for single-listing record dicts."""
    return _detail_payload


@pytest.fixture()
def envelope() -> Callable[..., dict[str, Any]]:
    """Factory fixture wrapping data in a ``{success, data}`` body."""
    return _envelope


@pytest.fixture()
def make_service() -> type[FakeListingService]:
    """Return the :class:`FakeListingService` class for tests to instantiate."""
    return FakeListingService


# ---------------------------------------------------------------------------
# Misc helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def logger() -> logging.Logger:
    """Return a ``logging.Logger`` scoped to the running test."""
    return logging.getLogger("tests")
