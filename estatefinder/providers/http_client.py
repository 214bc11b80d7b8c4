"""Async HTTP client for the listing service.

Wraps :class:`httpx.AsyncClient` with:

* **Automatic retries**: exponential back-off with random jitter via
  :mod:`tenacity`; configurable number of attempts.
* **Rate-limit awareness**: HTTP 429 responses pause retries for the
  duration given in the ``Retry-After`` header (or JSON body), then raise
  :class:`~estatefinder.core.exceptions.ServiceRateLimitError` if retries
  are exhausted.
* **Structured error mapping**: transient (5xx, network) errors are
  retried; persistent client errors (4xx other than 429, including 404)
  raise :class:`~estatefinder.core.exceptions.ServiceFetchError` immediately
  with ``status_code`` set, without consuming retry budget.

Typical usage::

    from estatefinder.providers.http_client import ListingHttpClient

    async with ListingHttpClient(base_url="http://localhost:8080") as client:
        response = await client.get("/api/sales", params={"state": "OR"})
        body = response.json()
"""

from __future__ import annotations

import logging
import random
from types import TracebackType
from typing import Any, Final

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from estatefinder.core.exceptions import ServiceFetchError, ServiceRateLimitError

__all__ = ["ListingHttpClient"]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: HTTP status codes that signal a transient server-side fault (safe to retry).
_RETRYABLE_STATUS: Final[frozenset[int]] = frozenset({500, 502, 503, 504})

_DEFAULT_CONNECT_TIMEOUT: Final[float] = 10.0
_DEFAULT_READ_TIMEOUT: Final[float] = 20.0
_DEFAULT_WRITE_TIMEOUT: Final[float] = 10.0

#: Default total attempts (1 initial + 2 retries).
_DEFAULT_MAX_ATTEMPTS: Final[int] = 3

#: Hard cap on exponential back-off base before adding jitter (seconds).
_MAX_BACKOFF_BASE: Final[float] = 30.0

#: Upper bound on jitter added on top of the exponential base (seconds).
_MAX_BACKOFF_JITTER: Final[float] = 5.0

_USER_AGENT: Final[str] = "estatefinder/0.1 (+https://github.com/estatefinder)"


# ---------------------------------------------------------------------------
# Internal sentinel exception
# ---------------------------------------------------------------------------


class _RetryableServerError(ServiceFetchError):
    """Internal: signals a 5xx status for tenacity to retry.

    Escapes :meth:`ListingHttpClient._request_with_retry` only once the
    retry budget is exhausted, and then as a plain :class:`ServiceFetchError`
    from the caller's point of view.
    """


# ---------------------------------------------------------------------------
# Retry wait strategy
# ---------------------------------------------------------------------------


def _service_wait(retry_state: RetryCallState) -> float:
    """Compute the wait duration before the next retry attempt.

    * :class:`ServiceRateLimitError` with a positive ``retry_after`` →
      honour that value exactly.
    * All other retryable errors → exponential back-off with random jitter.
    """
    if retry_state.outcome is not None:
        exc = retry_state.outcome.exception()
        if (
            isinstance(exc, ServiceRateLimitError)
            and exc.retry_after is not None
            and exc.retry_after > 0
        ):
            logger.debug("Honouring service Retry-After of %.1f s", exc.retry_after)
            return exc.retry_after

    attempt = max(retry_state.attempt_number, 1)
    base = min(2.0 ** (attempt - 1), _MAX_BACKOFF_BASE)
    jitter = random.uniform(0.0, min(base, _MAX_BACKOFF_JITTER))
    return base + jitter


# ---------------------------------------------------------------------------
# Public client
# ---------------------------------------------------------------------------


class ListingHttpClient:
    """Async HTTP client used by :class:`~estatefinder.providers.http_service.HttpListingService`.

    Each request method returns the :class:`httpx.Response` on HTTP 2xx and
    raises on every other outcome.  Use as an ``async with`` context manager
    to guarantee the connection pool is closed on exit.

    Args:
        base_url: Base URL prepended to all relative request paths.
        headers: Additional default headers merged into every request.
        connect_timeout: TCP connection establishment timeout in seconds.
        read_timeout: Timeout for receiving the first byte of the response.
        write_timeout: Timeout for uploading the request body.
        max_attempts: Total attempts including the initial try (≥ 1).

    Raises:
        ValueError: If ``max_attempts`` is less than 1.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        connect_timeout: float = _DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = _DEFAULT_READ_TIMEOUT,
        write_timeout: float = _DEFAULT_WRITE_TIMEOUT,
        max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be ≥ 1, got {max_attempts!r}.")

        self._base_url = base_url
        self._default_headers: dict[str, str] = headers or {}
        self._max_attempts = max_attempts
        self._timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=write_timeout,
            pool=5.0,
        )
        self._http: httpx.AsyncClient | None = None

    @property
    def label(self) -> str:
        """Short service label used in log lines and exception messages."""
        return self._base_url or "listing-service"

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ListingHttpClient:
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public request methods
    # ------------------------------------------------------------------

    async def get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform an HTTP GET request with retries.

        Args:
            url: The request URL or path (relative to ``base_url`` if set).
            params: Optional query-string parameters.
            headers: Per-request headers that override session defaults.

        Returns:
            The :class:`httpx.Response` on HTTP 2xx.

        Raises:
            ServiceRateLimitError: On HTTP 429 after exhausting retries.
            ServiceFetchError: On any other persistent HTTP or network error.
        """
        return await self._request_with_retry("GET", url, params=params, extra_headers=headers)

    async def close(self) -> None:
        """Close the underlying HTTP client.  Safe to call multiple times."""
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
            logger.debug("ListingHttpClient session closed.")
        self._http = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Return the open HTTP client, creating it lazily if needed."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                follow_redirects=True,
                headers={
                    "Accept": "application/json",
                    "User-Agent": _USER_AGENT,
                    **self._default_headers,
                },
            )
            logger.debug("ListingHttpClient session opened (base_url=%r).", self.label)
        return self._http

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute a single HTTP request with tenacity-managed retries.

        Transport errors that survive every attempt are wrapped in
        :class:`ServiceFetchError` so callers only ever see the service
        taxonomy.
        """
        retry_types = (
            _RetryableServerError,
            ServiceRateLimitError,
            httpx.TransportError,
        )

        def _before_sleep(rs: RetryCallState) -> None:
            exc = rs.outcome.exception() if rs.outcome else None
            logger.warning(
                "HTTP %s %s: attempt %d/%d failed (%s). Retrying…",
                method,
                url,
                rs.attempt_number,
                self._max_attempts,
                type(exc).__name__ if exc else "?",
            )

        response: httpx.Response | None = None

        try:
            async for attempt in AsyncRetrying(
                wait=_service_wait,
                stop=stop_after_attempt(self._max_attempts),
                retry=retry_if_exception_type(retry_types),
                reraise=True,
                before_sleep=_before_sleep,
            ):
                with attempt:
                    response = await self._single_request(
                        method=method,
                        url=url,
                        params=params,
                        extra_headers=extra_headers,
                    )
        except httpx.TransportError as exc:
            raise ServiceFetchError(
                self.label, f"{type(exc).__name__} on {method} {url}: {exc}"
            ) from exc

        assert response is not None, "tenacity exited without a response or exception"
        return response

    async def _single_request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        extra_headers: dict[str, str] | None,
    ) -> httpx.Response:
        """Perform exactly one HTTP request and map its status code.

        Raises:
            ServiceRateLimitError: On HTTP 429.
            _RetryableServerError: On HTTP 5xx (internal sentinel).
            ServiceFetchError: On non-retryable HTTP errors.
            httpx.TransportError: Network-level failures (propagated for retry).
        """
        client = await self._ensure_client()

        logger.debug("HTTP %s %s params=%s", method, url, params or {})

        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                headers=extra_headers,
            )
        except httpx.TransportError:
            logger.debug("Transport error on %s %s.", method, url, exc_info=True)
            raise

        logger.debug(
            "HTTP %s %s → %d (%d bytes)",
            method,
            url,
            response.status_code,
            len(response.content),
        )

        if response.is_success:
            return response

        if response.status_code == 429:
            retry_after = _parse_retry_after(response, self.label)
            logger.warning(
                "Service rate limit (%s) HTTP 429, retry_after=%.1f s",
                self.label,
                retry_after,
            )
            raise ServiceRateLimitError(self.label, retry_after=retry_after)

        if response.status_code in _RETRYABLE_STATUS:
            raise _RetryableServerError(
                self.label,
                f"Transient HTTP {response.status_code} from {self.label}",
                status_code=response.status_code,
            )

        raise ServiceFetchError(
            self.label,
            f"HTTP {response.status_code} from {self.label}: {response.text[:200]}",
            status_code=response.status_code,
        )


# ---------------------------------------------------------------------------
# Response parsing helpers
# ---------------------------------------------------------------------------


def _parse_retry_after(response: httpx.Response, label: str) -> float:
    """Extract back-off duration from an HTTP 429 response (always ≥ 1.0 s)."""
    header = response.headers.get("retry-after", "")
    if header:
        try:
            return max(float(header), 1.0)
        except ValueError:
            logger.debug("Could not parse Retry-After header %r for %s.", header, label)

    try:
        body = response.json()
    except ValueError:
        return 1.0
    if isinstance(body, dict):
        ra = body.get("retryAfter") or body.get("retry_after")
        if ra is not None:
            try:
                return max(float(ra), 1.0)
            except (TypeError, ValueError):
                pass
    return 1.0
