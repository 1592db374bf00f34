"""Tests for user-friendly error mapping."""

import pytest

from framer_pricing.core.errors import (
    CurrencyError,
    FieldError,
    PricingError,
    ShippingError,
    SkuNotFound,
    ValidationError,
)
from framer_pricing.integrations.prodigi.client import (
    CatalogAPIError,
    CatalogNotFoundError,
    CatalogRateLimitError,
    CatalogTimeoutError,
    CatalogValidationError,
)
from framer_pricing.user_errors import (
    CONNECTION_ERROR,
    GENERIC_ERROR,
    INVALID_CONFIGURATION,
    NOT_FOUND,
    PRICE_UNAVAILABLE,
    PRODUCT_UNAVAILABLE,
    RATE_LIMITED,
    SHIPPING_UNAVAILABLE,
    TIMED_OUT,
    get_user_friendly_error,
    is_retryable_error,
)


@pytest.mark.parametrize("error,expected", [
    (CatalogRateLimitError("quota"), RATE_LIMITED),
    (CatalogValidationError("Invalid request: SKU not found"), PRODUCT_UNAVAILABLE),
    (CatalogValidationError("Invalid request: destination not supported"), SHIPPING_UNAVAILABLE),
    (CatalogValidationError("Invalid request: bad attribute"), INVALID_CONFIGURATION),
    (CatalogNotFoundError("Not found"), NOT_FOUND),
    (CatalogTimeoutError("Request timed out"), TIMED_OUT),
    (CatalogAPIError("API error", status_code=429), RATE_LIMITED),
])
def test_catalog_errors(error, expected):
    assert get_user_friendly_error(error) == expected


def test_validation_error_lists_fields():
    error = ValidationError("Invalid shipping address", errors=[
        FieldError("countryCode", "required"),
        FieldError("zip", "required"),
    ])

    friendly = get_user_friendly_error(error)

    assert "countryCode, zip" in friendly.message
    assert friendly.retryable is False


def test_sku_not_found_is_product_unavailable():
    assert get_user_friendly_error(SkuNotFound("no SKU")) == PRODUCT_UNAVAILABLE


def test_missing_exchange_rate_is_price_unavailable():
    assert get_user_friendly_error(CurrencyError("No exchange rate for currency XYZ", currency="XYZ")) == PRICE_UNAVAILABLE
    assert get_user_friendly_error(
        ShippingError("Currency conversion unavailable: No exchange rate for currency XYZ", retryable=False)
    ) == PRICE_UNAVAILABLE


def test_pricing_error_status_in_details():
    error = PricingError("Failed to get quote", details={"status_code": 429})
    assert get_user_friendly_error(error) == RATE_LIMITED


def test_pricing_error_messages():
    assert get_user_friendly_error(PricingError("Pricing calculation timed out after 45s")) == TIMED_OUT
    assert get_user_friendly_error(PricingError("Failed: Request failed: refused")) == CONNECTION_ERROR
    assert get_user_friendly_error(PricingError("currency conversion failed")) == PRICE_UNAVAILABLE


def test_non_retryable_failures():
    assert get_user_friendly_error(ShippingError("rejected", retryable=False)) == SHIPPING_UNAVAILABLE
    assert get_user_friendly_error(PricingError("No quotes available", retryable=False)) == PRODUCT_UNAVAILABLE


def test_retryable_pricing_error_is_generic():
    friendly = get_user_friendly_error(PricingError("upstream hiccup"))
    assert friendly.title == GENERIC_ERROR.title
    assert friendly.retryable is True


def test_unknown_exception():
    assert get_user_friendly_error(RuntimeError("boom")) == GENERIC_ERROR
    assert get_user_friendly_error(OSError("network unreachable")) == CONNECTION_ERROR


def test_is_retryable_error():
    assert is_retryable_error(CatalogRateLimitError("quota"))
    assert not is_retryable_error(SkuNotFound("no SKU"))


def test_to_dict():
    assert set(RATE_LIMITED.to_dict()) == {"title", "message", "action", "retryable"}
