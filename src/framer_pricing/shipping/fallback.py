"""
Intelligent fallback shipping estimates.

Used when the provider returns no shipping quotes for a cart. Costs are
heuristic (destination multiplier, per-item and large-item surcharges)
and every option is tagged provider="intelligent_fallback" with
is_estimated=True so the checkout can show a disclaimer.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from framer_pricing.core.config import FREE_SHIPPING_THRESHOLD, round_money
from framer_pricing.core.schema import CartItem, DeliveryEstimate, ShippingCost, ShippingOption
from framer_pricing.integrations.currency import CurrencyService
from framer_pricing.pricing.sku import parse_size
from framer_pricing.shipping.delivery import EU_COUNTRIES

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = "intelligent_fallback"
FALLBACK_CARRIER = "Estimated"

BASE_SHIPPING_USD = 8.99
ADDITIONAL_ITEM_USD = 3.99
LARGE_ITEM_SURCHARGE_USD = 5.99
EXPRESS_MULTIPLIER = 1.6

# Square inches; 24x36 and up ships as an oversized parcel
LARGE_ITEM_AREA = 24 * 36

COUNTRY_MULTIPLIERS: Dict[str, float] = {
    "US": 1.0,
    "CA": 1.3,
    "GB": 1.8,
    "AU": 2.2,
    "DE": 1.9,
    "FR": 1.9,
    "IT": 2.0,
    "ES": 1.9,
}
DEFAULT_COUNTRY_MULTIPLIER = 2.5

# (standard, express) delivery windows by destination
FALLBACK_DELIVERY: Dict[str, Tuple[Tuple[int, int], Tuple[int, int]]] = {
    "US": ((5, 8), (4, 6)),
    "CA": ((7, 12), (5, 7)),
    "GB": ((7, 12), (5, 7)),
}
DEFAULT_FALLBACK_DELIVERY = ((10, 15), (7, 10))

MIN_FALLBACK_DAYS = 4

COUNTRY_CURRENCY_MAP: Dict[str, str] = {
    "US": "USD",
    "CA": "CAD",
    "GB": "GBP",
    "AU": "AUD",
    "NZ": "NZD",
    "JP": "JPY",
    "KR": "KRW",
    "SG": "SGD",
    "HK": "HKD",
    "CH": "CHF",
    "SE": "SEK",
    "NO": "NOK",
    "DK": "DKK",
    "PL": "PLN",
    "CZ": "CZK",
    "HU": "HUF",
    "MX": "MXN",
    "BR": "BRL",
    "IN": "INR",
}


def currency_for_country(country_code: str) -> str:
    code = (country_code or "").upper()
    if code in COUNTRY_CURRENCY_MAP:
        return COUNTRY_CURRENCY_MAP[code]
    if code in EU_COUNTRIES:
        return "EUR"
    return "USD"


def is_large_item(item: CartItem) -> bool:
    """Oversized by SKU hint or by configured print area."""
    if "large" in item.sku.lower():
        return True
    try:
        width, height = parse_size(item.frame_config.size)
    except ValueError:
        return False
    return width * height >= LARGE_ITEM_AREA


def fallback_delivery(country_code: str, express: bool = False) -> DeliveryEstimate:
    standard, expedited = FALLBACK_DELIVERY.get((country_code or "").upper(), DEFAULT_FALLBACK_DELIVERY)
    low, high = expedited if express else standard
    low = max(low, MIN_FALLBACK_DAYS)
    return DeliveryEstimate(min=low, max=max(high, low + 1))


def fallback_shipping_usd(items: Sequence[CartItem], country_code: str) -> float:
    """Standard shipping estimate in USD before any free-shipping rule."""
    multiplier = COUNTRY_MULTIPLIERS.get((country_code or "").upper(), DEFAULT_COUNTRY_MULTIPLIER)
    cost = BASE_SHIPPING_USD * multiplier

    total_quantity = sum(item.quantity for item in items)
    if total_quantity > 1:
        cost += (total_quantity - 1) * ADDITIONAL_ITEM_USD

    if any(is_large_item(item) for item in items):
        cost += LARGE_ITEM_SURCHARGE_USD

    return cost


async def estimate_fallback_options(
    items: Sequence[CartItem],
    country_code: str,
    currency_service: CurrencyService,
    currency: Optional[str] = None,
    free_shipping_threshold: Optional[float] = None,
) -> List[ShippingOption]:
    """
    Estimate Standard and Express options without the provider.

    Args:
        items: Cart items (item prices are used for the free-shipping rule)
        country_code: Destination ISO country code
        currency_service: Converts USD estimates into the result currency
        currency: Result currency (defaults to the destination's currency)
        free_shipping_threshold: Item subtotal in USD at which Standard is free

    Returns:
        [Standard, Express] estimated options
    """
    target = (currency or currency_for_country(country_code)).upper()
    threshold = free_shipping_threshold if free_shipping_threshold is not None else FREE_SHIPPING_THRESHOLD

    subtotal_usd = 0.0
    for item in items:
        rate = await currency_service.get_rate(item.currency, "USD")
        subtotal_usd += item.price * item.quantity * rate

    standard_usd = fallback_shipping_usd(items, country_code)
    express_usd = standard_usd * EXPRESS_MULTIPLIER
    if subtotal_usd >= threshold:
        logger.info(f"Item subtotal {subtotal_usd:.2f} USD qualifies for free standard shipping")
        standard_usd = 0.0

    to_target = await currency_service.get_rate("USD", target)
    items_cost = round_money(subtotal_usd * to_target, target)

    options = []
    for method, shipping_usd, express in (("Standard", standard_usd, False), ("Express", express_usd, True)):
        shipping = round_money(shipping_usd * to_target, target)
        options.append(ShippingOption(
            method=method,
            cost=ShippingCost(
                items=items_cost,
                shipping=shipping,
                total=round_money(items_cost + shipping, target),
                currency=target,
            ),
            delivery=fallback_delivery(country_code, express=express),
            provider=FALLBACK_PROVIDER,
            is_estimated=True,
            carrier=FALLBACK_CARRIER,
        ))

    logger.warning(
        f"Using {FALLBACK_PROVIDER} shipping for {country_code}: "
        + ", ".join(f"{o.method} {o.cost.shipping} {target}" for o in options)
    )
    return options
