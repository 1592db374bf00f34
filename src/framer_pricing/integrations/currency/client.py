#!/usr/bin/env python3
"""
Currency conversion service with live exchange rates.

Uses ExchangeRate-API (USD base, no API key required). Rates are cached on
the service instance, never at module level, and the fallback table from
the configuration is used when the rate API is unavailable.
"""

import logging
import time
from typing import Dict, Optional

import httpx

from framer_pricing.core.config import (
    CURRENCY_API_URL,
    CURRENCY_CACHE_SECONDS,
    CURRENCY_TIMEOUT_SECONDS,
    FALLBACK_RATES,
    round_money,
)
from framer_pricing.core.errors import CurrencyError

logger = logging.getLogger(__name__)


class CurrencyService:
    """
    Converts amounts between currencies.

    All rates are expressed per 1 USD; cross rates go through USD.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        cache_seconds: Optional[int] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        fallback_rates: Optional[Dict[str, float]] = None,
    ):
        self.api_url = api_url or CURRENCY_API_URL
        self.cache_seconds = cache_seconds if cache_seconds is not None else CURRENCY_CACHE_SECONDS
        self.timeout = timeout if timeout is not None else CURRENCY_TIMEOUT_SECONDS
        self.fallback_rates = dict(fallback_rates or FALLBACK_RATES)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

        self._rates: Optional[Dict[str, float]] = None
        self._fetched_at: float = 0

    async def __aenter__(self) -> "CurrencyService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # Rates
    # =========================================================================

    async def fetch_live_rates(self) -> Dict[str, float]:
        """
        Fetch live exchange rates from the API.

        Returns:
            Rates per 1 USD; the fallback table if the API is unavailable
        """
        logger.debug(f"Fetching live currency rates from {self.api_url}")
        try:
            response = await self._client.get(
                self.api_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch live currency rates, using fallback rates: {e}")
            return dict(self.fallback_rates)

        rates = data.get("rates") if isinstance(data, dict) else None
        if not rates:
            logger.warning("Invalid currency API response format, using fallback rates")
            return dict(self.fallback_rates)

        logger.info(f"Fetched {len(rates)} live currency rates")
        return {str(k).upper(): float(v) for k, v in rates.items()}

    async def get_rates(self) -> Dict[str, float]:
        """Get exchange rates (from cache or fetch new)."""
        now = time.monotonic()
        if self._rates is not None and (now - self._fetched_at) < self.cache_seconds:
            return self._rates

        self._rates = await self.fetch_live_rates()
        self._fetched_at = now
        return self._rates

    def clear_cache(self) -> None:
        """Clear the cache (useful for manual refresh)."""
        self._rates = None
        self._fetched_at = 0

    def _rate_for(self, rates: Dict[str, float], currency: str) -> float:
        """
        Rate per 1 USD, from the live table or else the fallback table.

        Raises:
            CurrencyError: If neither table knows the currency
        """
        rate = rates.get(currency)
        if rate:
            return rate
        rate = self.fallback_rates.get(currency)
        if rate:
            logger.warning(f"Currency {currency} missing from live rates, using fallback rate {rate}")
            return rate
        logger.error(f"No exchange rate for currency {currency}")
        raise CurrencyError(f"No exchange rate for currency {currency}", currency=currency)

    # =========================================================================
    # Conversion
    # =========================================================================

    async def get_rate(self, from_currency: str, to_currency: str) -> float:
        """Exchange rate from one currency to another."""
        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return 1.0

        rates = await self.get_rates()
        if source == "USD":
            return self._rate_for(rates, target)
        if target == "USD":
            return 1 / self._rate_for(rates, source)
        return self._rate_for(rates, target) / self._rate_for(rates, source)

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Convert an amount, rounded to the target currency's minor unit."""
        rate = await self.get_rate(from_currency, to_currency)
        return round_money(amount * rate, to_currency)

    async def convert_from_usd(self, amount_usd: float, target_currency: str) -> float:
        """Convert an amount from USD to the target currency."""
        return await self.convert(amount_usd, "USD", target_currency)
