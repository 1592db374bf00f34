#!/usr/bin/env python3
"""
Prodigi API Client for catalog quotes.

This module provides an async client for the Prodigi v4 API: quote
requests (prices and shipping per method) and product lookups. Retries
with bounded exponential backoff live here and nowhere else; callers see
either a parsed result or a typed CatalogAPIError.

The client is an explicitly constructed instance passed into each
aggregator. There is no module-level client.
"""

import asyncio
import logging
import random
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from framer_pricing.core.schema import CatalogQuote, QuoteRequest
from framer_pricing.integrations.prodigi.config import (
    PRODIGI_API_KEY,
    PRODIGI_API_BASE_URL,
    PRODIGI_TIMEOUT_SECONDS,
    PRODIGI_MAX_RETRIES,
    PRODIGI_RETRY_DELAY_SECONDS,
    PRODIGI_MAX_RETRY_DELAY_SECONDS,
    RETRYABLE_STATUS_CODES,
    SHIPPING_METHODS,
)
from framer_pricing.integrations.prodigi.transformer import (
    build_quote_payload,
    parse_quote_response,
    select_quote,
)

logger = logging.getLogger(__name__)

# "API calls quota exceeded! maximum admitted 30 per 30s."
_RATE_LIMIT_PATTERN = re.compile(r"maximum admitted (\d+) per (\d+)s")


# =============================================================================
# Errors
# =============================================================================

class CatalogAPIError(Exception):
    """Exception raised for Prodigi API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
        endpoint: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        self.endpoint = endpoint
        super().__init__(self.message)

    def is_retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code,
            "endpoint": self.endpoint,
            "response": self.response,
        }


class CatalogRateLimitError(CatalogAPIError):
    """HTTP 429. retry_after is in seconds."""

    def __init__(self, message: str, retry_after: float = 30.0, **kwargs):
        self.retry_after = retry_after
        super().__init__(message, status_code=429, **kwargs)


class CatalogNotFoundError(CatalogAPIError):
    """HTTP 404: unknown SKU or resource."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, status_code=404, **kwargs)


class CatalogValidationError(CatalogAPIError):
    """HTTP 400: the provider rejected the request (bad SKU/attributes/destination)."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, status_code=400, **kwargs)


class CatalogTimeoutError(CatalogAPIError):
    """The request timed out or the connection failed before a response."""

    def is_retryable(self) -> bool:
        return True


# =============================================================================
# Client
# =============================================================================

class CatalogClient:
    """
    Async client for the Prodigi v4 API.

    Handles authentication, retries and error mapping, and provides:
    - Quotes: one shipping method, or every method for shipping options
    - Products: single product lookup by SKU
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        max_retry_delay: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the Prodigi client.

        Args:
            api_key: Prodigi API key (defaults to env var)
            base_url: API base URL (defaults to env var / environment table)
            timeout: Per-request timeout in seconds
            max_retries: Total attempts per request
            retry_delay: Base delay for exponential backoff
            max_retry_delay: Upper bound for a single backoff delay
            http_client: Pre-built httpx.AsyncClient (tests inject a MockTransport)
            sleep: Coroutine used to wait between attempts
        """
        self.api_key = api_key or PRODIGI_API_KEY
        self.base_url = (base_url or PRODIGI_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else PRODIGI_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries if max_retries is not None else PRODIGI_MAX_RETRIES)
        self.retry_delay = retry_delay if retry_delay is not None else PRODIGI_RETRY_DELAY_SECONDS
        self.max_retry_delay = (
            max_retry_delay if max_retry_delay is not None else PRODIGI_MAX_RETRY_DELAY_SECONDS
        )
        self._sleep = sleep
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # API Request Helpers
    # =========================================================================

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests including the API key."""
        return {
            "X-API-Key": self.api_key or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _backoff_delay(self, attempt: int, error: CatalogAPIError) -> float:
        """Delay before the next attempt: provider hint for 429, else exponential with jitter."""
        if isinstance(error, CatalogRateLimitError):
            return min(error.retry_after, self.max_retry_delay)
        delay = self.retry_delay * (2 ** (attempt - 1)) + random.uniform(0, self.retry_delay)
        return min(delay, self.max_retry_delay)

    def _raise_for_response(self, response: httpx.Response, endpoint: str) -> None:
        """Map an error response onto the CatalogAPIError hierarchy."""
        raw_text = response.text or ""
        try:
            data: Any = response.json() if raw_text else {}
        except ValueError:
            data = {"message": raw_text}

        message = raw_text
        if isinstance(data, dict):
            message = data.get("message") or data.get("statusText") or raw_text
        message = message or response.reason_phrase or "Unknown error"

        logger.debug(f"Prodigi error response {response.status_code} for {endpoint}: {raw_text[:500]}")

        status = response.status_code
        if status == 429:
            retry_after = 30.0
            header = response.headers.get("Retry-After")
            match = _RATE_LIMIT_PATTERN.search(raw_text)
            if header:
                try:
                    retry_after = float(header)
                except ValueError:
                    logger.debug(f"Ignoring non-numeric Retry-After header: {header}")
            elif match:
                retry_after = float(match.group(2))
            raise CatalogRateLimitError(
                f"Rate limit exceeded: {message}",
                retry_after=retry_after,
                response=data,
                endpoint=endpoint,
            )
        if status == 404:
            raise CatalogNotFoundError(f"Not found: {message}", response=data, endpoint=endpoint)
        if status == 400:
            raise CatalogValidationError(f"Invalid request: {message}", response=data, endpoint=endpoint)

        raise CatalogAPIError(
            f"API error: {message}",
            status_code=status,
            response=data,
            endpoint=endpoint,
        )

    async def _send(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make a single API request."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug(f"Prodigi API {method} {url}")

        try:
            response = await self._client.request(
                method,
                url,
                headers=self._get_headers(),
                json=json_data,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise CatalogTimeoutError(f"Request timed out: {e}", endpoint=endpoint)
        except httpx.TransportError as e:
            raise CatalogTimeoutError(f"Request failed: {e}", endpoint=endpoint)

        if response.status_code >= 400:
            self._raise_for_response(response, endpoint)

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError:
            raise CatalogAPIError(
                "Failed to parse response",
                status_code=response.status_code,
                response=response.text[:500],
                endpoint=endpoint,
            )

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make an API request with bounded retries.

        Retries on 408/429/5xx and transport failures, up to max_retries
        attempts in total. Non-retryable errors are raised immediately.

        Raises:
            CatalogAPIError: If the request ultimately fails
        """
        attempt = 1
        while True:
            try:
                return await self._send(method, endpoint, json_data=json_data)
            except CatalogAPIError as e:
                if not e.is_retryable() or attempt >= self.max_retries:
                    if attempt > 1:
                        logger.error(f"Prodigi {method} {endpoint} failed after {attempt} attempts: {e}")
                    raise
                delay = self._backoff_delay(attempt, e)
                logger.warning(
                    f"Retrying Prodigi {method} {endpoint} in {delay:.1f}s "
                    f"(attempt {attempt}/{self.max_retries}): {e}"
                )
                await self._sleep(delay)
                attempt += 1

    # =========================================================================
    # Quotes API
    # =========================================================================

    async def create_quote(
        self,
        request: QuoteRequest,
        shipping_method: Optional[str] = None,
    ) -> List[CatalogQuote]:
        """
        Request quotes for a set of items.

        Args:
            request: Quote request (distinct sku/attributes items)
            shipping_method: Overrides request.shipping_method

        Returns:
            Quotes returned by the provider (possibly empty)
        """
        payload = build_quote_payload(request, shipping_method=shipping_method)
        logger.debug(f"Prodigi quote request: {payload}")
        data = await self._make_request("POST", "/quotes", json_data=payload)
        quotes = parse_quote_response(data)
        logger.info(
            f"Prodigi returned {len(quotes)} quote(s) for {len(request.items)} item(s) "
            f"to {request.destination_country}"
        )
        return quotes

    async def get_quote(self, request: QuoteRequest) -> Optional[CatalogQuote]:
        """
        Get the quote for the request's shipping method.

        Returns:
            The matching quote (or Standard / first as fallback), None if the
            provider returned no quotes at all
        """
        quotes = await self.create_quote(request)
        return select_quote(quotes, request.shipping_method)

    async def get_shipping_quotes(self, request: QuoteRequest) -> List[CatalogQuote]:
        """
        Get one quote per shipping method.

        Methods the provider rejects for this destination are skipped. When
        every method fails, the last error is raised.

        Returns:
            Quotes keyed by distinct shipment method, in SHIPPING_METHODS order
        """
        quotes: List[CatalogQuote] = []
        seen = set()
        last_error: Optional[CatalogAPIError] = None
        failures = 0

        for method in SHIPPING_METHODS:
            try:
                method_quotes = await self.create_quote(request, shipping_method=method)
            except CatalogValidationError as e:
                logger.info(f"Shipping method {method} unavailable for {request.destination_country}: {e}")
                last_error = e
                failures += 1
                continue

            for quote in method_quotes:
                key = quote.shipment_method.lower()
                if key == method.lower() and key not in seen:
                    seen.add(key)
                    quotes.append(quote)

        if failures == len(SHIPPING_METHODS) and last_error is not None:
            raise last_error

        return quotes

    # =========================================================================
    # Products API
    # =========================================================================

    async def get_product(self, sku: str) -> Dict[str, Any]:
        """
        Get product details for a SKU.

        Raises:
            CatalogNotFoundError: If the SKU does not exist
        """
        data = await self._make_request("GET", f"/products/{sku}")
        return data.get("product", {})


def create_catalog_client(**kwargs) -> CatalogClient:
    """Factory function to create a configured catalog client."""
    return CatalogClient(**kwargs)
