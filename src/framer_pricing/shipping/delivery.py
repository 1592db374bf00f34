"""
Delivery time estimates.

Total delivery = production days + route shipping days scaled by the
shipping method. Route times are business days after dispatch, looked up
by origin region and destination (country for a few key markets, region
otherwise).
"""

import math
from typing import Dict, Optional, Tuple

from framer_pricing.core.config import SHIPPING_ORIGIN_COUNTRY
from framer_pricing.core.schema import DeliveryEstimate

DayRange = Tuple[int, int]

PRODUCTION_DAYS: Dict[str, DayRange] = {
    "wall-art": (1, 2),
    "default": (1, 4),
}

EU_COUNTRIES = (
    "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR",
    "DE", "GR", "HU", "IE", "IT", "LV", "LT", "LU", "MT", "NL",
    "PL", "PT", "RO", "SK", "SI", "ES", "SE",
)

# Destinations looked up by country rather than region
_COUNTRY_DESTINATIONS = ("GB", "US", "CA", "MX", "AU", "NZ")

# origin region -> destination -> (min, max) business days
ROUTE_SHIPPING_DAYS: Dict[str, Dict[str, DayRange]] = {
    "GB": {
        "GB": (2, 3),
        "EU": (5, 7),
        "US": (8, 12),
        "CA": (8, 12),
        "AU": (10, 15),
        "NZ": (10, 15),
        "INTL": (10, 20),
    },
    "US": {
        "US": (4, 6),
        "CA": (6, 8),
        "MX": (6, 10),
        "GB": (8, 12),
        "EU": (8, 14),
        "AU": (10, 15),
        "INTL": (10, 20),
    },
    "EU": {
        "EU": (5, 7),
        "GB": (6, 8),
        "US": (8, 14),
        "CA": (8, 14),
        "AU": (12, 18),
        "INTL": (10, 20),
    },
    "AU": {
        "AU": (2, 5),
        "NZ": (5, 7),
        "US": (10, 15),
        "GB": (10, 15),
        "EU": (12, 18),
        "INTL": (10, 20),
    },
}

METHOD_FACTORS: Dict[str, float] = {
    "budget": 1.5,
    "standard": 1.0,
    "express": 0.6,
    "overnight": 0.3,
}


def shipping_region(country_code: str) -> str:
    code = (country_code or "").upper()
    if code in ("GB", "US", "AU"):
        return code
    if code in EU_COUNTRIES:
        return "EU"
    return "INTL"


def _destination_key(country_code: str) -> str:
    code = (country_code or "").upper()
    if code in _COUNTRY_DESTINATIONS:
        return code
    return shipping_region(code)


def shipping_days(origin_country: str, destination_country: str, method: str = "Standard") -> DayRange:
    """Route shipping days after dispatch, scaled by the method factor."""
    table = ROUTE_SHIPPING_DAYS.get(shipping_region(origin_country), ROUTE_SHIPPING_DAYS["US"])
    low, high = table.get(_destination_key(destination_country), table["INTL"])
    factor = METHOD_FACTORS.get((method or "").lower(), 1.0)
    return math.ceil(low * factor), math.ceil(high * factor)


def estimate_delivery(
    destination_country: str,
    method: str = "Standard",
    origin_country: Optional[str] = None,
    product_category: str = "wall-art",
) -> DeliveryEstimate:
    """
    Estimate total delivery time in business days.

    Args:
        destination_country: Destination ISO country code
        method: Budget, Standard, Express or Overnight
        origin_country: Fulfilment country (from the quote); defaults to
            SHIPPING_ORIGIN_COUNTRY
        product_category: Production-time category

    Returns:
        DeliveryEstimate with production and shipping days combined
    """
    production = PRODUCTION_DAYS.get(product_category, PRODUCTION_DAYS["default"])
    low, high = shipping_days(origin_country or SHIPPING_ORIGIN_COUNTRY, destination_country, method)
    return DeliveryEstimate(min=production[0] + low, max=production[1] + high)


def describe_delivery(
    destination_country: str,
    method: str = "Standard",
    origin_country: Optional[str] = None,
) -> str:
    """Human-readable production / shipping / total breakdown."""
    origin = origin_country or SHIPPING_ORIGIN_COUNTRY
    production = PRODUCTION_DAYS["wall-art"]
    low, high = shipping_days(origin, destination_country, method)
    total = estimate_delivery(destination_country, method, origin_country=origin)

    parts = [
        f"Production: {production[0]}-{production[1]} days",
        f"Shipping: {low}-{high} days",
        f"Total: {total.formatted}",
    ]
    if shipping_region(origin) != shipping_region(destination_country):
        parts.append("International orders may experience customs delays")
    return " | ".join(parts)
