"""Failure-path tests for the HTTP transport and the HTTP listing service.

1. **Transport failures**: :class:`~estatefinder.providers.http_client.ListingHttpClient`
   with a mocked :class:`httpx.AsyncClient` that raises
   :class:`httpx.TransportError` subclasses.  Retries are attempted and the
   final error surfaces as :class:`~estatefinder.core.exceptions.ServiceFetchError`.

2. **Status-code mapping**: 5xx codes are retried; 4xx codes raise
   immediately without retrying; 429 raises
   :class:`~estatefinder.core.exceptions.ServiceRateLimitError` with the
   ``retry_after`` parsed from the header or JSON body.

3. **Service wiring**: :class:`~estatefinder.providers.http_service.HttpListingService`
   hits the right paths, maps 404 to
   :class:`~estatefinder.core.exceptions.ListingNotFoundError` and non-JSON
   bodies to :class:`~estatefinder.core.exceptions.MalformedResponseError`.

No network I/O occurs: all HTTP calls are replaced by ``AsyncMock`` /
``MagicMock`` stubs, and :func:`asyncio.sleep` is patched wherever retries
would otherwise wait.
"""

from __future__ import annotations

import json as _json
import logging
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from estatefinder.core.exceptions import (
    ListingNotFoundError,
    MalformedResponseError,
    ServiceFetchError,
    ServiceRateLimitError,
)
from estatefinder.core.settings import Settings
from estatefinder.providers.http_client import ListingHttpClient
from estatefinder.providers.http_service import HttpListingService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _mock_httpx_response(
    *,
    status_code: int = 200,
    json_data: Any = None,
    text: str | None = None,
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Create a minimal mock of an :class:`httpx.Response`."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.headers = headers or {}
    _text = text or (_json.dumps(json_data) if json_data is not None else "")
    resp.text = _text
    if json_data is not None:
        resp.json.return_value = json_data
    else:
        resp.json.side_effect = _json.JSONDecodeError("no json", _text, 0)
    resp.content = _text.encode()
    return resp


def _inject_mock_underlying(client: ListingHttpClient, mock_http: MagicMock) -> None:
    """Replace the internal :class:`httpx.AsyncClient` of *client* with *mock_http*.

    The mock must report ``is_closed = False`` so that ``_ensure_client``
    does not recreate it, and must provide an async ``aclose``.
    """
    mock_http.is_closed = False
    mock_http.aclose = AsyncMock()
    client._http = mock_http  # noqa: SLF001


def _mock_http(**request_kwargs: Any) -> MagicMock:
    mock_http = MagicMock()
    mock_http.request = AsyncMock(**request_kwargs)
    return mock_http


# ---------------------------------------------------------------------------
# Section 1: transport failures
# ---------------------------------------------------------------------------


class TestTransportFailures:
    @pytest.fixture()
    async def http1(self) -> AsyncGenerator[ListingHttpClient, None]:
        """Open :class:`ListingHttpClient` with ``max_attempts=1`` (no retries)."""
        async with ListingHttpClient(base_url="http://api.test", max_attempts=1) as client:
            yield client

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectTimeout("timed out"),
            httpx.ReadTimeout("read timed out"),
            httpx.ConnectError("connection refused"),
        ],
    )
    async def test_transport_error_becomes_fetch_error(
        self, http1: ListingHttpClient, error: httpx.TransportError
    ) -> None:
        _inject_mock_underlying(http1, _mock_http(side_effect=error))

        with pytest.raises(ServiceFetchError) as exc_info:
            await http1.get("/api/sales")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.TransportError)

    async def test_single_failure_then_success(self) -> None:
        async with ListingHttpClient(max_attempts=2) as client:
            mock_http = _mock_http(
                side_effect=[
                    httpx.ConnectTimeout("first attempt timed out"),
                    _mock_httpx_response(json_data={"success": True, "data": []}),
                ]
            )
            _inject_mock_underlying(client, mock_http)

            with patch("asyncio.sleep", new=AsyncMock(return_value=None)):
                response = await client.get("/api/sales")

        assert response.status_code == 200
        assert mock_http.request.call_count == 2

    async def test_all_retries_exhausted(self) -> None:
        async with ListingHttpClient(max_attempts=3) as client:
            mock_http = _mock_http(side_effect=httpx.ConnectTimeout("always times out"))
            _inject_mock_underlying(client, mock_http)

            with (
                patch("asyncio.sleep", new=AsyncMock(return_value=None)),
                pytest.raises(ServiceFetchError),
            ):
                await client.get("/api/sales")

        assert mock_http.request.call_count == 3

    def test_zero_attempts_rejected(self) -> None:
        with pytest.raises(ValueError):
            ListingHttpClient(max_attempts=0)


# ---------------------------------------------------------------------------
# Section 2: status-code mapping
# ---------------------------------------------------------------------------


class TestStatusErrors:
    @pytest.fixture()
    async def http1(self) -> AsyncGenerator[ListingHttpClient, None]:
        async with ListingHttpClient(base_url="http://api.test", max_attempts=1) as client:
            yield client

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    async def test_5xx_raises_fetch_error(self, http1: ListingHttpClient, status: int) -> None:
        _inject_mock_underlying(
            http1, _mock_http(return_value=_mock_httpx_response(status_code=status, text="oops"))
        )
        with pytest.raises(ServiceFetchError) as exc_info:
            await http1.get("/api/sales")
        assert exc_info.value.status_code == status

    async def test_5xx_is_retried(self) -> None:
        async with ListingHttpClient(max_attempts=3) as client:
            mock_http = _mock_http(
                side_effect=[
                    _mock_httpx_response(status_code=503, text="busy"),
                    _mock_httpx_response(status_code=502, text="bad gateway"),
                    _mock_httpx_response(json_data={"success": True, "data": []}),
                ]
            )
            _inject_mock_underlying(client, mock_http)

            with patch("asyncio.sleep", new=AsyncMock(return_value=None)):
                response = await client.get("/api/sales")

        assert response.status_code == 200
        assert mock_http.request.call_count == 3

    @pytest.mark.parametrize("status", [400, 403, 404])
    async def test_4xx_raises_without_retry(self, status: int) -> None:
        async with ListingHttpClient(max_attempts=3) as client:
            mock_http = _mock_http(return_value=_mock_httpx_response(status_code=status, text="no"))
            _inject_mock_underlying(client, mock_http)

            with pytest.raises(ServiceFetchError) as exc_info:
                await client.get("/api/sales/1")

        assert exc_info.value.status_code == status
        mock_http.request.assert_called_once()

    async def test_429_retry_after_from_header(self, http1: ListingHttpClient) -> None:
        _inject_mock_underlying(
            http1,
            _mock_http(
                return_value=_mock_httpx_response(
                    status_code=429, headers={"retry-after": "45"}, text="Rate limited"
                )
            ),
        )
        with pytest.raises(ServiceRateLimitError) as exc_info:
            await http1.get("/api/sales")
        assert exc_info.value.retry_after == 45.0

    async def test_429_retry_after_from_json_body(self, http1: ListingHttpClient) -> None:
        _inject_mock_underlying(
            http1,
            _mock_http(return_value=_mock_httpx_response(status_code=429, json_data={"retryAfter": 60})),
        )
        with pytest.raises(ServiceRateLimitError) as exc_info:
            await http1.get("/api/sales")
        assert exc_info.value.retry_after == 60.0

    async def test_429_retry_after_defaults_to_one(self, http1: ListingHttpClient) -> None:
        _inject_mock_underlying(
            http1, _mock_http(return_value=_mock_httpx_response(status_code=429, text="slow down"))
        )
        with pytest.raises(ServiceRateLimitError) as exc_info:
            await http1.get("/api/sales")
        assert exc_info.value.retry_after == 1.0

    async def test_429_waits_retry_after_then_succeeds(self) -> None:
        async with ListingHttpClient(max_attempts=2) as client:
            mock_http = _mock_http(
                side_effect=[
                    _mock_httpx_response(status_code=429, headers={"retry-after": "7"}, text="x"),
                    _mock_httpx_response(json_data={"success": True, "data": []}),
                ]
            )
            _inject_mock_underlying(client, mock_http)
            sleep = AsyncMock(return_value=None)

            with patch("asyncio.sleep", new=sleep):
                response = await client.get("/api/sales")

        assert response.status_code == 200
        sleep.assert_awaited_once_with(7.0)


# ---------------------------------------------------------------------------
# Section 3: HttpListingService
# ---------------------------------------------------------------------------


def _service_with_mock_get(get: AsyncMock) -> HttpListingService:
    http = MagicMock(spec=ListingHttpClient)
    http.get = get
    http.label = "http://api.test"
    http.close = AsyncMock()
    return HttpListingService(http)


class TestHttpListingService:
    async def test_fetch_listings_hits_collection_path(self) -> None:
        get = AsyncMock(return_value=_mock_httpx_response(json_data={"success": True, "data": []}))
        service = _service_with_mock_get(get)

        body = await service.fetch_listings({"state": "OR", "limit": 5})

        assert body == {"success": True, "data": []}
        get.assert_awaited_once_with("/api/sales", params={"state": "OR", "limit": 5})

    async def test_empty_params_sent_as_none(self) -> None:
        get = AsyncMock(return_value=_mock_httpx_response(json_data={"success": True, "data": []}))
        await _service_with_mock_get(get).fetch_listings({})
        get.assert_awaited_once_with("/api/sales", params=None)

    async def test_fetch_listing_quotes_id(self) -> None:
        get = AsyncMock(return_value=_mock_httpx_response(json_data={"success": True, "data": {}}))
        await _service_with_mock_get(get).fetch_listing("external-1/2")
        get.assert_awaited_once_with("/api/sales/external-1%2F2")

    async def test_404_becomes_not_found(self) -> None:
        get = AsyncMock(side_effect=ServiceFetchError("http://api.test", "HTTP 404", status_code=404))
        with pytest.raises(ListingNotFoundError) as exc_info:
            await _service_with_mock_get(get).fetch_listing("999")
        assert exc_info.value.listing_id == "999"

    async def test_other_status_propagates(self) -> None:
        get = AsyncMock(side_effect=ServiceFetchError("http://api.test", "HTTP 500", status_code=500))
        with pytest.raises(ServiceFetchError) as exc_info:
            await _service_with_mock_get(get).fetch_listing("1")
        assert not isinstance(exc_info.value, ListingNotFoundError)

    async def test_non_json_body_is_malformed(self) -> None:
        get = AsyncMock(return_value=_mock_httpx_response(text="<html>gateway</html>"))
        with pytest.raises(MalformedResponseError):
            await _service_with_mock_get(get).fetch_listings({})

    async def test_close_closes_owned_client(self) -> None:
        service = _service_with_mock_get(AsyncMock())
        async with service:
            pass
        service._http.close.assert_awaited_once()  # noqa: SLF001

    async def test_shared_client_left_open(self) -> None:
        http = MagicMock(spec=ListingHttpClient)
        http.close = AsyncMock()
        await HttpListingService(http, owns_client=False).close()
        http.close.assert_not_awaited()

    def test_from_settings(self, clean_env: None) -> None:
        settings = Settings(api_base_url="http://api.test", api_max_attempts=5)
        service = HttpListingService.from_settings(settings)
        assert service._http.label == "http://api.test"  # noqa: SLF001
        assert service._http._max_attempts == 5  # noqa: SLF001
