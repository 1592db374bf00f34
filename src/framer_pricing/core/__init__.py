"""Core infrastructure: configuration, schema, errors, attribute normalization."""

from framer_pricing.core.config import (
    validate_config,
    get_config_summary,
    round_money,
)
from framer_pricing.core.errors import (
    CurrencyError,
    FieldError,
    FramerPricingError,
    SkuNotFound,
    PricingError,
    ShippingError,
    ValidationError,
)
from framer_pricing.core.schema import (
    CartItem,
    FrameConfig,
    CatalogProduct,
    QuoteLine,
    QuoteRequest,
    PricingResult,
    ExactPrice,
    EstimatedPrice,
    QuoteMismatch,
    ShippingAddress,
    ShippingOption,
    ShippingSummary,
)
from framer_pricing.core.normalizer import normalize_attributes

__all__ = [
    "validate_config",
    "get_config_summary",
    "round_money",
    "CurrencyError",
    "FieldError",
    "FramerPricingError",
    "SkuNotFound",
    "PricingError",
    "ShippingError",
    "ValidationError",
    "CartItem",
    "FrameConfig",
    "CatalogProduct",
    "QuoteLine",
    "QuoteRequest",
    "PricingResult",
    "ExactPrice",
    "EstimatedPrice",
    "QuoteMismatch",
    "ShippingAddress",
    "ShippingOption",
    "ShippingSummary",
    "normalize_attributes",
]
