#!/usr/bin/env python3
"""
Configuration for the Art Framer pricing core.
Handles environment variable loading and validation.
"""

import os
import sys
from typing import Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# =============================================================================
# Pricing
# =============================================================================

# Request-level timeout around one complete pricing calculation
PRICING_TIMEOUT_SECONDS: float = float(os.getenv("PRICING_TIMEOUT_SECONDS", "45"))

# Maximum drift allowed between sum(itemPrices * qty) and subtotal
PRICE_MATCH_TOLERANCE: float = float(os.getenv("PRICE_MATCH_TOLERANCE", "0.01"))

# validate_prices() flags items whose quoted price differs by more than this
PRICE_VALIDATION_THRESHOLD_PERCENT: float = float(
    os.getenv("PRICE_VALIDATION_THRESHOLD_PERCENT", "5")
)

# Candidates scoring below this are never used as a SKU
SKU_MIN_SCORE: int = int(os.getenv("SKU_MIN_SCORE", "40"))

# Simplified destination tax rates, applied to the item subtotal
TAX_RATES: Dict[str, float] = {
    "US": 0.08,  # Average US sales tax
    "CA": 0.13,  # Average Canadian tax
    "GB": 0.20,  # UK VAT
    "AU": 0.10,  # Australian GST
    "DE": 0.19,  # German VAT
    "FR": 0.20,  # French VAT
    "IT": 0.22,  # Italian VAT
    "ES": 0.21,  # Spanish VAT
}


# =============================================================================
# Shipping
# =============================================================================

# Recommended method must arrive within this many business days
SHIPPING_RECOMMENDED_MAX_DAYS: int = int(os.getenv("SHIPPING_RECOMMENDED_MAX_DAYS", "10"))

# Fulfilment origin used when the provider does not report one
SHIPPING_ORIGIN_COUNTRY: str = os.getenv("SHIPPING_ORIGIN_COUNTRY", "US")

# Item subtotal (USD) at which the fallback estimator ships for free
FREE_SHIPPING_THRESHOLD: float = float(os.getenv("FREE_SHIPPING_THRESHOLD", "100.00"))


# =============================================================================
# Currency Service
# =============================================================================

CURRENCY_API_URL: str = os.getenv(
    "CURRENCY_API_URL", "https://api.exchangerate-api.com/v4/latest/USD"
)
CURRENCY_CACHE_SECONDS: int = int(os.getenv("CURRENCY_CACHE_SECONDS", str(12 * 60 * 60)))
CURRENCY_TIMEOUT_SECONDS: float = float(os.getenv("CURRENCY_TIMEOUT_SECONDS", "5"))

# Fallback rates (per 1 USD) in case the rate API is unavailable
FALLBACK_RATES: Dict[str, float] = {
    "USD": 1.0,
    "CAD": 1.35,
    "EUR": 0.92,
    "GBP": 0.79,
    "AUD": 1.52,
    "JPY": 149.50,
    "KRW": 1320.00,
    "SGD": 1.34,
    "HKD": 7.80,
    "CHF": 0.88,
    "SEK": 10.50,
    "NOK": 10.75,
    "DKK": 6.90,
    "PLN": 4.05,
    "CZK": 23.00,
    "HUF": 360.00,
    "MXN": 17.50,
    "BRL": 5.00,
    "INR": 83.00,
    "NZD": 1.62,
}

# Currencies without minor units
ZERO_DECIMAL_CURRENCIES = ("JPY", "KRW", "VND", "CLP", "PYG", "UGX")


# =============================================================================
# Helpers
# =============================================================================

def round_money(amount: float, currency: Optional[str] = None) -> float:
    """Round an amount to the minor unit of its currency."""
    if currency and currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return float(round(amount))
    return round(amount, 2)


def validate_config() -> None:
    """
    Validate the core configuration values.
    Raises SystemExit if any value is out of range.
    """
    errors = []

    if PRICING_TIMEOUT_SECONDS <= 0:
        errors.append("PRICING_TIMEOUT_SECONDS must be positive")

    if PRICE_MATCH_TOLERANCE < 0:
        errors.append("PRICE_MATCH_TOLERANCE must not be negative")

    if SHIPPING_RECOMMENDED_MAX_DAYS < 1:
        errors.append("SHIPPING_RECOMMENDED_MAX_DAYS must be at least 1")

    if len(SHIPPING_ORIGIN_COUNTRY) != 2:
        errors.append("SHIPPING_ORIGIN_COUNTRY must be a 2-letter country code")

    if errors:
        print("Configuration Error(s):", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        sys.exit(1)


def get_config_summary() -> str:
    """Get a summary of the current configuration (for logging)."""
    return f"""
Art Framer Pricing Configuration:
  Pricing:
    - Timeout: {PRICING_TIMEOUT_SECONDS}s
    - Match Tolerance: {PRICE_MATCH_TOLERANCE}
    - Validation Threshold: {PRICE_VALIDATION_THRESHOLD_PERCENT}%
    - SKU Min Score: {SKU_MIN_SCORE}
    - Tax Rates: {len(TAX_RATES)} countries

  Shipping:
    - Recommended Max Days: {SHIPPING_RECOMMENDED_MAX_DAYS}
    - Origin Country: {SHIPPING_ORIGIN_COUNTRY}
    - Free Shipping Threshold: {FREE_SHIPPING_THRESHOLD}

  Currency:
    - Rates URL: {CURRENCY_API_URL}
    - Cache: {CURRENCY_CACHE_SECONDS}s
    - Fallback Rates: {len(FALLBACK_RATES)} currencies

  Log Level: {LOG_LEVEL}
"""


if __name__ == "__main__":
    validate_config()
    print(get_config_summary())
