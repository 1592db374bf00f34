"""Tests for schema value objects and their camelCase serialization."""

import pytest

from framer_pricing.core.errors import ValidationError
from framer_pricing.core.schema import (
    CartItem,
    DeliveryEstimate,
    EstimatedPrice,
    ExactPrice,
    FrameConfig,
    PricingResult,
    QuoteMismatch,
    ShippingAddress,
)


def test_cart_item_rejects_zero_quantity():
    """Quantity must be at least 1."""
    with pytest.raises(ValidationError) as exc_info:
        CartItem(id="a", product_id="p", sku="global-can-8x20-x", quantity=0, price=10.0)

    assert exc_info.value.fields == ["quantity"]


@pytest.mark.parametrize("quantity", [1.9, 0.5, "2.5", "two", True, None])
def test_cart_item_from_dict_rejects_non_whole_quantity(quantity):
    """Fractional or non-numeric quantities are rejected, never truncated."""
    with pytest.raises(ValidationError) as exc_info:
        CartItem.from_dict({"id": "a", "productId": "p", "sku": "global-can-8x20-x", "quantity": quantity, "price": 10.0})

    assert exc_info.value.fields == ["quantity"]


def test_cart_item_from_dict_accepts_whole_quantities():
    base = {"id": "a", "productId": "p", "sku": "global-can-8x20-x", "price": 10.0}

    assert CartItem.from_dict({**base, "quantity": 2.0}).quantity == 2
    assert CartItem.from_dict({**base, "quantity": " 3 "}).quantity == 3
    assert CartItem.from_dict(base).quantity == 1


def test_cart_item_from_dict_reads_camel_case():
    """UI payloads use camelCase keys, frameConfig included."""
    item = CartItem.from_dict({
        "id": "cart-1",
        "productId": "prod-1",
        "sku": "fra-box-gitd-610x610",
        "quantity": 2,
        "price": 89.0,
        "frameConfig": {"size": "24x24", "mountColor": "Snow White", "productType": "framed-print"},
    })

    assert item.product_id == "prod-1"
    assert item.original_price == 89.0
    assert item.frame_config.mount_color == "Snow White"
    assert item.frame_config.product_type == "framed-print"


def test_frame_config_round_trip():
    """FrameConfig survives to_dict/from_dict."""
    config = FrameConfig(size="16x20", edge="19mm", mount_color="black", canvas_type="slim")
    assert FrameConfig.from_dict(config.to_dict()) == config


def test_pricing_result_round_trip_preserves_total():
    """Serializing to the checkout UI and back keeps total == subtotal + tax + shipping."""
    result = PricingResult(
        subtotal=90.0,
        tax=7.2,
        shipping=12.99,
        total=110.19,
        currency="USD",
        item_prices={0: ExactPrice(45.0), 1: EstimatedPrice(22.5)},
        unmatched=[],
        warnings=[QuoteMismatch(1, "global-fap-12x16", "averaged")],
    )

    restored = PricingResult.from_dict(result.to_dict())

    assert restored.total == pytest.approx(restored.subtotal + restored.tax + restored.shipping, abs=0.005)
    assert restored.total == 110.19
    assert restored.is_estimated
    assert isinstance(restored.item_prices[1], EstimatedPrice)
    assert isinstance(restored.item_prices[0], ExactPrice)
    assert restored.warnings[0].reason == "averaged"


def test_pricing_result_to_dict_shape():
    """The checkout UI reads camelCase keys."""
    result = PricingResult(
        subtotal=45.0, tax=3.6, shipping=10.0, total=58.6, currency="USD",
        item_prices={0: ExactPrice(45.0)},
    )
    data = result.to_dict()

    assert data["itemPrices"] == {"0": 45.0}
    assert data["isEstimated"] is False
    assert data["estimatedItems"] == []
    assert data["unmatchedItems"] == []


def test_unmatched_items_mark_result_estimated():
    """An item left out of the subtotal makes the whole result an estimate."""
    result = PricingResult(
        subtotal=45.0, tax=0.0, shipping=0.0, total=45.0, currency="USD",
        item_prices={0: ExactPrice(45.0)}, unmatched=[1],
    )
    assert result.is_estimated


def test_shipping_address_keeps_empty_country_code():
    """An explicit empty countryCode must reach validation as empty."""
    address = ShippingAddress.from_dict({"address1": "1 Main St", "countryCode": ""})
    assert address.country_code == ""


def test_delivery_estimate_formatting():
    assert DeliveryEstimate(5, 8).formatted == "5-8 business days"
    assert DeliveryEstimate(1, 1).formatted == "1 business day"
