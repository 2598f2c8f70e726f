"""
Base API Client - Common HTTP request pattern for upstream sources.

Shared by the openFDA, RxNorm and NewsAPI clients:
- httpx.AsyncClient management
- Per-request timeout
- Status codes mapped onto the exception hierarchy (no retries)
- Read-through caching via the injected CacheStore
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from typing_extensions import Self

from pharmapulse.core.exceptions import (
    NetworkError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
    UpstreamTimeoutError,
)
from pharmapulse.infrastructure.cache import CacheStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseAPIClient:
    """
    Base class for upstream API clients.

    Subclasses set ``_service_name`` and can override:
    - ``_handle_expected_status()``: short-circuit service-specific status
      codes (e.g. openFDA answers 404 for "no matches")

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            def __init__(self, cache=None):
                super().__init__(base_url="https://api.example.com", cache=cache)

            async def get_item(self, item_id: str) -> dict | None:
                return await self._make_request(f"/items/{item_id}")
    """

    _service_name: str = "API"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 15.0,
        headers: dict[str, str] | None = None,
        cache: CacheStore | None = None,
        cache_ttl: float | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Default request timeout in seconds
            headers: Default headers for all requests
            cache: Shared cache store; None disables caching
            cache_ttl: TTL for cached responses (None uses the store default)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers=headers or {},
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    @property
    def service_name(self) -> str:
        return self._service_name

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
        expect_json: bool = True,
    ) -> dict[str, Any] | str | None:
        """
        Make a GET request.

        Args:
            url: Full URL or path (appended to base_url)
            params: Query string parameters
            timeout: Per-request timeout (default: client timeout)
            expect_json: If True, parse response as JSON; otherwise return text

        Returns:
            Parsed JSON dict, response text, or whatever
            _handle_expected_status() short-circuits with

        Raises:
            UpstreamTimeoutError: request exceeded its timeout
            NetworkError: connection failure or unexpected 4xx status
            RateLimitError: HTTP 429
            ServiceUnavailableError: HTTP 5xx
            ParseError: body is not valid JSON
        """
        full_url = self._build_url(url)
        request_timeout = timeout or self._timeout

        try:
            response = await self._client.get(full_url, params=params, timeout=request_timeout)
        except httpx.TimeoutException as e:
            logger.warning(f"{self._service_name}: timeout after {request_timeout:g}s for {full_url}")
            raise UpstreamTimeoutError(self._service_name, request_timeout) from e
        except httpx.RequestError as e:
            logger.warning(f"{self._service_name} request error: {e}")
            raise NetworkError(f"{self._service_name}: connection failed: {e}") from e

        expected = self._handle_expected_status(response)
        if expected is not _CONTINUE:
            return expected

        status = response.status_code
        if status == 429:
            raise RateLimitError(
                f"Rate limited by {self._service_name}",
                retry_after=self._get_retry_after(response),
            )
        if status >= 500:
            raise ServiceUnavailableError(f"HTTP {status}", service=self._service_name)
        if status >= 400:
            raise NetworkError(f"{self._service_name}: HTTP {status}: {response.reason_phrase}")

        return self._parse_response(response, expect_json)

    def _handle_expected_status(self, response: httpx.Response) -> Any:
        """
        Handle expected non-200 status codes.

        Override in subclasses for service-specific behavior.
        Return a value to short-circuit, or the sentinel _CONTINUE to continue
        normal processing.
        """
        return _CONTINUE

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> dict[str, Any] | str:
        """Parse response body."""
        if not expect_json:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise ParseError("Invalid JSON response", source=self._service_name) from e

    async def _cached(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """Read-through the shared cache; fetch errors propagate and are not cached."""
        if self._cache is None:
            return await fetch()
        return await self._cache.get_or_fetch(key, fetch, ttl=ttl or self._cache_ttl)

    @staticmethod
    def _get_retry_after(response: httpx.Response) -> float:
        """Extract Retry-After from response headers."""
        try:
            return float(response.headers.get("Retry-After", 1.0))
        except (ValueError, TypeError):
            return 1.0

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


# Sentinel object to indicate "continue normal processing" from _handle_expected_status
_CONTINUE = object()
