"""
Shipping Aggregator

Requests one provider quote per shipping method for the whole cart and
turns them into ShippingOptions. The address is validated before any
network call. When the provider has no quotes for the destination, the
intelligent fallback estimator takes over and tags its options as
estimates.

Recommendation and cost range are derived from the option list on demand;
they are never stored state.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from framer_pricing.core.config import SHIPPING_RECOMMENDED_MAX_DAYS, round_money
from framer_pricing.core.errors import CurrencyError, FieldError, ShippingError, ValidationError
from framer_pricing.core.schema import (
    CartItem,
    CatalogQuote,
    ShippingAddress,
    ShippingCost,
    ShippingOption,
    ShippingSummary,
)
from framer_pricing.integrations.currency import CurrencyService
from framer_pricing.integrations.prodigi.client import CatalogAPIError, CatalogClient
from framer_pricing.pricing.request import build_quote_request, prepare_cart_items
from framer_pricing.pricing.sku import SkuResolver
from framer_pricing.shipping.address import validate_shipping_address
from framer_pricing.shipping.delivery import estimate_delivery
from framer_pricing.shipping.fallback import estimate_fallback_options

logger = logging.getLogger(__name__)


# =============================================================================
# Option Ranking
# =============================================================================

def get_recommended_method(
    options: Sequence[ShippingOption],
    max_days: Optional[int] = None,
) -> Optional[ShippingOption]:
    """
    Cheapest option arriving within max_days business days.

    Ties go to the faster option, then to list order. When nothing
    arrives in time the cheapest option overall is recommended.
    """
    if not options:
        return None

    threshold = max_days if max_days is not None else SHIPPING_RECOMMENDED_MAX_DAYS
    in_time = [o for o in options if o.delivery.max <= threshold]
    pool = in_time or list(options)
    # min() keeps the first of equal keys, so list order breaks remaining ties
    return min(pool, key=lambda o: (o.cost.shipping, o.delivery.max))


def cost_range(options: Sequence[ShippingOption]) -> Optional[Tuple[float, float]]:
    """(cheapest, most expensive) shipping cost, None without options."""
    if not options:
        return None
    costs = [o.cost.shipping for o in options]
    return min(costs), max(costs)


def summarize_shipping(
    options: Sequence[ShippingOption],
    max_days: Optional[int] = None,
) -> ShippingSummary:
    return ShippingSummary(
        options=list(options),
        recommended=get_recommended_method(options, max_days=max_days),
        cost_range=cost_range(options),
        is_estimated=any(o.is_estimated for o in options),
    )


# =============================================================================
# Aggregator
# =============================================================================

class ShippingAggregator:
    """
    Computes shipping options for a cart and destination.

    Args:
        catalog: Catalog client used for per-method quotes
        currency_service: Converts quote amounts into the requested currency
        sku_resolver: Resolves SKUs for items that lack one
        max_days: Delivery threshold for the recommended method
        guaranteed: Fall back to estimates on provider failure instead of
            raising ShippingError
    """

    def __init__(
        self,
        catalog: CatalogClient,
        currency_service: CurrencyService,
        sku_resolver: Optional[SkuResolver] = None,
        max_days: Optional[int] = None,
        guaranteed: bool = False,
    ):
        self.catalog = catalog
        self.currency_service = currency_service
        self.sku_resolver = sku_resolver or SkuResolver()
        self.max_days = max_days if max_days is not None else SHIPPING_RECOMMENDED_MAX_DAYS
        self.guaranteed = guaranteed

    async def _to_option(
        self,
        quote: CatalogQuote,
        destination: str,
        target: str,
        rates: Dict[str, float],
    ) -> ShippingOption:
        source = quote.currency.upper()
        if source not in rates:
            rates[source] = await self.currency_service.get_rate(source, target)
        rate = rates[source]

        items_cost = round_money(quote.items_cost * rate, target)
        shipping = round_money(quote.shipping_cost * rate, target)
        return ShippingOption(
            method=quote.shipment_method,
            cost=ShippingCost(
                items=items_cost,
                shipping=shipping,
                total=round_money(items_cost + shipping, target),
                currency=target,
            ),
            delivery=estimate_delivery(destination, quote.shipment_method, origin_country=quote.origin_country),
        )

    async def calculate_shipping(
        self,
        items: Sequence[CartItem],
        address: ShippingAddress,
        currency: Optional[str] = None,
    ) -> List[ShippingOption]:
        """
        Calculate shipping options for a cart.

        Args:
            items: Cart items
            address: Destination address (validated before any network call)
            currency: Result currency (defaults to the quote currency)

        Returns:
            Provider options in method order, or fallback estimates when
            the provider returned none

        Raises:
            ValidationError: Empty cart or incomplete address
            SkuNotFound: An item has no resolvable SKU
            ShippingError: The provider call failed (unless guaranteed), or no
                exchange rate exists for currency
        """
        address = validate_shipping_address(address)
        if not items:
            raise ValidationError("Cart is empty", errors=[FieldError("items", "At least one item is required")])
        if currency:
            try:
                await self.currency_service.get_rate("USD", currency)
            except CurrencyError as e:
                logger.error(f"Shipping requested in unsupported currency {currency}")
                raise ShippingError(
                    f"Currency conversion unavailable: {e.message}",
                    details=e.details,
                    retryable=False,
                )

        destination = address.country_code
        resolved, attributes = prepare_cart_items(items, self.sku_resolver)
        request = build_quote_request(resolved, attributes, destination)

        try:
            quotes = await self.catalog.get_shipping_quotes(request)
        except CatalogAPIError as e:
            if self.guaranteed:
                logger.warning(f"Shipping quote failed, using fallback estimates: {e}")
                return await estimate_fallback_options(resolved, destination, self.currency_service, currency)
            logger.error(f"Shipping quote failed for {destination}: {e}")
            raise ShippingError(
                f"Failed to get shipping options: {e.message}",
                details=e.to_dict(),
                retryable=e.is_retryable(),
            )

        if not quotes:
            logger.warning(f"No shipping quotes returned for {destination}")
            return await estimate_fallback_options(resolved, destination, self.currency_service, currency)

        target = (currency or quotes[0].currency).upper()
        rates: Dict[str, float] = {}
        options = [await self._to_option(q, destination, target, rates) for q in quotes]

        logger.info(
            f"{len(options)} shipping option(s) to {destination}: "
            + ", ".join(f"{o.method} {o.cost.shipping} {target}" for o in options)
        )
        return options

    async def get_shipping_summary(
        self,
        items: Sequence[CartItem],
        address: ShippingAddress,
        currency: Optional[str] = None,
    ) -> ShippingSummary:
        """calculate_shipping() plus the recommended method and cost range."""
        options = await self.calculate_shipping(items, address, currency=currency)
        return summarize_shipping(options, max_days=self.max_days)
