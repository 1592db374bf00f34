"""Shipping options: address validation, delivery estimates, fallback pricing."""

from framer_pricing.shipping.address import validate_shipping_address
from framer_pricing.shipping.delivery import describe_delivery, estimate_delivery
from framer_pricing.shipping.fallback import currency_for_country, estimate_fallback_options
from framer_pricing.shipping.aggregator import (
    ShippingAggregator,
    cost_range,
    get_recommended_method,
    summarize_shipping,
)

__all__ = [
    "validate_shipping_address",
    "describe_delivery",
    "estimate_delivery",
    "currency_for_country",
    "estimate_fallback_options",
    "ShippingAggregator",
    "cost_range",
    "get_recommended_method",
    "summarize_shipping",
]
