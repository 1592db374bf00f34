"""Tests for ShippingAggregator and option ranking."""

import asyncio

import pytest

from framer_pricing.core.errors import ShippingError, ValidationError
from framer_pricing.core.schema import DeliveryEstimate, ShippingAddress, ShippingCost, ShippingOption
from framer_pricing.integrations.prodigi.client import CatalogAPIError
from framer_pricing.shipping.aggregator import (
    ShippingAggregator,
    cost_range,
    get_recommended_method,
    summarize_shipping,
)
from framer_pricing.shipping.fallback import FALLBACK_PROVIDER


def run(coro):
    return asyncio.run(coro)


def option(method, shipping, max_days, min_days=None):
    return ShippingOption(
        method=method,
        cost=ShippingCost(items=50.0, shipping=shipping, total=50.0 + shipping),
        delivery=DeliveryEstimate(min=min_days or max_days - 2, max=max_days),
    )


@pytest.fixture
def aggregator(fake_catalog, fake_currency):
    return ShippingAggregator(fake_catalog, fake_currency)


@pytest.fixture
def provider_quotes(make_quote):
    return [
        make_quote([("global-can-8x20-x", {}, 45.0)], shipping=10.0, method="Standard"),
        make_quote([("global-can-8x20-x", {}, 45.0)], shipping=25.0, method="Express"),
    ]


# =============================================================================
# Ranking
# =============================================================================

def test_recommends_cheapest_within_threshold():
    options = [option("Express", 25.0, 6), option("Standard", 10.0, 8), option("Budget", 5.0, 12)]
    assert get_recommended_method(options, max_days=10).method == "Standard"


def test_recommends_cheapest_overall_when_none_in_time():
    options = [option("Express", 25.0, 6), option("Standard", 10.0, 8)]
    assert get_recommended_method(options, max_days=3).method == "Standard"


def test_cost_tie_goes_to_faster_option():
    options = [option("Standard", 10.0, 8), option("Express", 10.0, 6)]
    assert get_recommended_method(options, max_days=10).method == "Express"


def test_full_tie_keeps_list_order():
    options = [option("A", 10.0, 8), option("B", 10.0, 8)]
    assert get_recommended_method(options).method == "A"


def test_no_options():
    assert get_recommended_method([]) is None
    assert cost_range([]) is None


def test_summary():
    options = [option("Express", 25.0, 6), option("Standard", 10.0, 8)]

    summary = summarize_shipping(options, max_days=10)

    assert summary.recommended.method == "Standard"
    assert summary.cost_range == (10.0, 25.0)
    assert not summary.is_estimated
    assert summary.to_dict()["costRange"] == {"min": 10.0, "max": 25.0}


# =============================================================================
# Aggregator
# =============================================================================

def test_provider_options(aggregator, fake_catalog, provider_quotes, make_item, us_address):
    fake_catalog.shipping_quotes = provider_quotes

    options = run(aggregator.calculate_shipping([make_item()], us_address))

    assert [o.method for o in options] == ["Standard", "Express"]
    standard, express = options
    assert standard.cost.items == 45.0
    assert standard.cost.shipping == 10.0
    assert standard.cost.total == 55.0
    assert standard.provider == "prodigi"
    assert not standard.is_estimated
    assert (standard.delivery.min, standard.delivery.max) == (5, 8)
    assert (express.delivery.min, express.delivery.max) == (4, 6)
    assert fake_catalog.requests[0].destination_country == "US"


def test_provider_options_in_requested_currency(aggregator, fake_catalog, provider_quotes, make_item, us_address):
    fake_catalog.shipping_quotes = provider_quotes

    options = run(aggregator.calculate_shipping([make_item()], us_address, currency="EUR"))

    assert options[0].cost.currency == "EUR"
    assert options[0].cost.shipping == 5.0
    assert options[1].cost.shipping == 12.5


def test_summary_recommendation(fake_catalog, fake_currency, provider_quotes, make_item, us_address):
    fake_catalog.shipping_quotes = provider_quotes
    aggregator = ShippingAggregator(fake_catalog, fake_currency, max_days=6)

    summary = run(aggregator.get_shipping_summary([make_item()], us_address))

    assert summary.recommended.method == "Express"
    assert summary.cost_range == (10.0, 25.0)


def test_no_provider_quotes_uses_fallback(aggregator, fake_catalog, make_item, us_address):
    fake_catalog.shipping_quotes = []

    options = run(aggregator.calculate_shipping([make_item()], us_address))

    assert [o.method for o in options] == ["Standard", "Express"]
    assert all(o.provider == FALLBACK_PROVIDER and o.is_estimated for o in options)


def test_provider_failure_raises_shipping_error(aggregator, fake_catalog, make_item, us_address):
    fake_catalog.error = CatalogAPIError("Service unavailable", status_code=503)

    with pytest.raises(ShippingError) as exc_info:
        run(aggregator.calculate_shipping([make_item()], us_address))

    assert exc_info.value.retryable is True
    assert exc_info.value.details["status_code"] == 503


def test_guaranteed_mode_falls_back_on_failure(fake_catalog, fake_currency, make_item, us_address):
    fake_catalog.error = CatalogAPIError("Service unavailable", status_code=503)
    aggregator = ShippingAggregator(fake_catalog, fake_currency, guaranteed=True)

    options = run(aggregator.calculate_shipping([make_item()], us_address))

    assert all(o.is_estimated for o in options)


def test_invalid_address_never_calls_provider(aggregator, fake_catalog, make_item):
    address = ShippingAddress(address1="1 High Street", city="London", zip="SW1A 1AA", country_code="")

    with pytest.raises(ValidationError) as exc_info:
        run(aggregator.calculate_shipping([make_item()], address))

    assert "countryCode" in exc_info.value.fields
    assert fake_catalog.requests == []


def test_empty_cart_is_rejected(aggregator, fake_catalog, us_address):
    with pytest.raises(ValidationError):
        run(aggregator.calculate_shipping([], us_address))

    assert fake_catalog.requests == []


def test_unknown_currency_raises_shipping_error(aggregator, fake_catalog, provider_quotes, make_item, us_address):
    """No exchange rate for the requested currency fails before the provider is called."""
    fake_catalog.shipping_quotes = provider_quotes

    with pytest.raises(ShippingError) as exc_info:
        run(aggregator.calculate_shipping([make_item()], us_address, currency="XYZ"))

    assert exc_info.value.retryable is False
    assert "Currency" in exc_info.value.message
    assert fake_catalog.requests == []
