"""Cart pricing: SKU resolution, quote matching, tax and totals."""

from framer_pricing.pricing.aggregator import PricingAggregator
from framer_pricing.pricing.attributes import build_attributes
from framer_pricing.pricing.request import build_quote_request, prepare_cart_items
from framer_pricing.pricing.matcher import MatchResult, match
from framer_pricing.pricing.sku import SkuResolver, extract_base_sku, resolve_sku
from framer_pricing.pricing.tax import TaxPolicy

__all__ = [
    "PricingAggregator",
    "build_attributes",
    "build_quote_request",
    "prepare_cart_items",
    "MatchResult",
    "match",
    "SkuResolver",
    "extract_base_sku",
    "resolve_sku",
    "TaxPolicy",
]
