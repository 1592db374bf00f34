"""Shared test fixtures for framer_pricing tests."""

import asyncio
from typing import Dict, List, Optional

import pytest

from framer_pricing.core.errors import CurrencyError
from framer_pricing.core.schema import (
    CartItem,
    CatalogQuote,
    FrameConfig,
    QuoteLine,
    QuoteRequest,
    ShippingAddress,
)


class FakeCatalog:
    """
    Stand-in for CatalogClient.

    Set `quote` / `shipping_quotes` to what the provider should return, or
    `error` to an exception it should raise. Every request is recorded.
    """

    def __init__(self):
        self.quote: Optional[CatalogQuote] = None
        self.shipping_quotes: List[CatalogQuote] = []
        self.error: Optional[Exception] = None
        self.delay: float = 0
        self.requests: List[QuoteRequest] = []

    async def get_quote(self, request: QuoteRequest) -> Optional[CatalogQuote]:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.quote

    async def get_shipping_quotes(self, request: QuoteRequest) -> List[CatalogQuote]:
        self.requests.append(request)
        if self.error:
            raise self.error
        return list(self.shipping_quotes)


class FakeCurrency:
    """Stand-in for CurrencyService with fixed rates per 1 USD."""

    def __init__(self, rates: Optional[Dict[str, float]] = None):
        self.rates = {"USD": 1.0, "EUR": 0.5, "GBP": 0.8, "JPY": 150.0}
        if rates:
            self.rates.update(rates)
        self.calls: List[tuple] = []

    async def get_rate(self, from_currency: str, to_currency: str) -> float:
        source, target = from_currency.upper(), to_currency.upper()
        self.calls.append((source, target))
        for code in (source, target):
            if code not in self.rates:
                raise CurrencyError(f"No exchange rate for currency {code}", currency=code)
        return self.rates[target] / self.rates[source]


@pytest.fixture
def fake_catalog():
    """Catalog client double with no quote configured."""
    return FakeCatalog()


@pytest.fixture
def fake_currency():
    """Currency service double (1 USD = 0.5 EUR = 0.8 GBP = 150 JPY)."""
    return FakeCurrency()


@pytest.fixture
def make_item():
    """Factory for cart items."""
    def _make(sku="global-can-8x20-x", quantity=1, price=45.0, index=0, **frame):
        return CartItem(
            id=f"item-{index}",
            product_id=f"product-{index}",
            sku=sku,
            quantity=quantity,
            price=price,
            frame_config=FrameConfig(**frame),
        )
    return _make


@pytest.fixture
def make_quote():
    """Factory for provider quotes built from (sku, attributes, unit_cost[, copies]) tuples."""
    def _make(lines, shipping=10.0, method="Standard", currency="USD", origin="US"):
        quote_lines = []
        for entry in lines:
            sku, attributes, unit_cost = entry[:3]
            copies = entry[3] if len(entry) > 3 else 1
            quote_lines.append(QuoteLine(sku, attributes, unit_cost, currency, copies))
        return CatalogQuote(
            shipment_method=method,
            lines=quote_lines,
            items_cost=sum(line.unit_cost * line.copies for line in quote_lines),
            shipping_cost=shipping,
            currency=currency,
            origin_country=origin,
        )
    return _make


@pytest.fixture
def us_address():
    """A complete US shipping address."""
    return ShippingAddress(
        address1="123 Main Street",
        city="Portland",
        state="OR",
        zip="97201",
        country_code="US",
        first_name="Sam",
        last_name="Rivera",
    )
