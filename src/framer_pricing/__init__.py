"""
framer_pricing - Art Framer pricing and shipping quote reconciliation

Requests quotes from the Prodigi print-on-demand catalog, matches the
returned quote lines back to cart items, and produces reconciled totals
and shipping options for the checkout.
"""

__version__ = "1.0.0"

from framer_pricing.core.config import validate_config, get_config_summary
from framer_pricing.core.schema import CartItem, FrameConfig, PricingResult, ShippingOption
from framer_pricing.core.normalizer import normalize_attributes
from framer_pricing.pricing import PricingAggregator, resolve_sku
from framer_pricing.shipping import ShippingAggregator, validate_shipping_address
from framer_pricing.user_errors import get_user_friendly_error

__all__ = [
    "validate_config",
    "get_config_summary",
    "CartItem",
    "FrameConfig",
    "PricingResult",
    "ShippingOption",
    "normalize_attributes",
    "PricingAggregator",
    "resolve_sku",
    "ShippingAggregator",
    "validate_shipping_address",
    "get_user_friendly_error",
]
