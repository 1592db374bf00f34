"""
Pricing Aggregator

Turns a cart into a reconciled PricingResult:

    resolve SKUs -> build attributes -> one QuoteRequest per unique
    (sku, attributes) -> catalog quote -> match lines to items ->
    currency conversion -> tax -> total

The aggregator holds injected collaborators only (catalog client, currency
service, SKU resolver, tax policy). Every calculation builds fresh request
and result objects, so one aggregator can serve concurrent carts.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from framer_pricing.core.config import (
    PRICE_MATCH_TOLERANCE,
    PRICE_VALIDATION_THRESHOLD_PERCENT,
    PRICING_TIMEOUT_SECONDS,
    round_money,
)
from framer_pricing.core.errors import CurrencyError, FieldError, PricingError, SkuNotFound, ValidationError
from framer_pricing.core.schema import (
    CartItem,
    CatalogQuote,
    ItemPrice,
    PriceMismatch,
    PriceValidationResult,
    PricingResult,
    QuoteLine,
    QuoteRequest,
)
from framer_pricing.integrations.currency import CurrencyService
from framer_pricing.integrations.prodigi.client import (
    CatalogAPIError,
    CatalogClient,
    CatalogNotFoundError,
    CatalogValidationError,
)
from framer_pricing.integrations.prodigi.config import DEFAULT_SHIPPING_METHOD, SHIPPING_METHODS
from framer_pricing.pricing.matcher import MatchResult, match
from framer_pricing.pricing.request import build_quote_request, prepare_cart_items
from framer_pricing.pricing.sku import SkuResolver
from framer_pricing.pricing.tax import TaxPolicy
from framer_pricing.shipping.delivery import estimate_delivery

logger = logging.getLogger(__name__)


# =============================================================================
# Input Validation
# =============================================================================

def canonical_shipping_method(method: Optional[str]) -> str:
    """
    Canonical casing for a shipping method name.

    Raises:
        ValidationError: If the method is not one the provider offers
    """
    wanted = (method or DEFAULT_SHIPPING_METHOD).strip().lower()
    for known in SHIPPING_METHODS:
        if known.lower() == wanted:
            return known
    raise ValidationError(
        f"Unknown shipping method: {method}",
        errors=[FieldError("shippingMethod", f"Must be one of {', '.join(SHIPPING_METHODS)}")],
    )


def validate_destination(country_code: Optional[str]) -> str:
    code = (country_code or "").strip().upper()
    if len(code) != 2 or not code.isalpha():
        raise ValidationError(
            "Destination country is required",
            errors=[FieldError("destinationCountry", "Must be a 2-letter country code")],
        )
    return code


def validate_cart(items: Sequence[CartItem]) -> None:
    if not items:
        raise ValidationError("Cart is empty", errors=[FieldError("items", "At least one item is required")])


def validate_currency(currency: Optional[str]) -> Optional[str]:
    """Upper-cased ISO 4217 code, or None when no currency was requested."""
    if currency is None:
        return None
    code = str(currency).strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValidationError(
            f"Invalid currency: {currency}",
            errors=[FieldError("currency", "Must be a 3-letter currency code")],
        )
    return code


# =============================================================================
# Aggregator
# =============================================================================

class PricingAggregator:
    """
    Computes reconciled cart pricing.

    Args:
        catalog: Catalog client used for quotes
        currency_service: Converts quote amounts into the requested currency
        sku_resolver: Resolves SKUs for items that lack one
        tax_policy: Destination tax rule (TaxPolicy by default)
        timeout: Request-level timeout around one whole calculation
        tolerance: Allowed drift before a provider/computed subtotal
            difference is logged
    """

    def __init__(
        self,
        catalog: CatalogClient,
        currency_service: CurrencyService,
        sku_resolver: Optional[SkuResolver] = None,
        tax_policy: Optional[TaxPolicy] = None,
        timeout: Optional[float] = None,
        tolerance: Optional[float] = None,
    ):
        self.catalog = catalog
        self.currency_service = currency_service
        self.sku_resolver = sku_resolver or SkuResolver()
        self.tax_policy = tax_policy or TaxPolicy()
        self.timeout = timeout if timeout is not None else PRICING_TIMEOUT_SECONDS
        self.tolerance = tolerance if tolerance is not None else PRICE_MATCH_TOLERANCE

    # =========================================================================
    # Request Building
    # =========================================================================

    def prepare_items(self, items: Sequence[CartItem]) -> Tuple[List[CartItem], List[Dict[str, str]]]:
        """Resolve SKUs and build attributes; see prepare_cart_items()."""
        return prepare_cart_items(items, self.sku_resolver)

    def build_quote_request(
        self,
        items: Sequence[CartItem],
        attributes: Sequence[Dict[str, str]],
        destination_country: str,
        shipping_method: str = DEFAULT_SHIPPING_METHOD,
    ) -> QuoteRequest:
        return build_quote_request(items, attributes, destination_country, shipping_method)

    # =========================================================================
    # Provider Calls
    # =========================================================================

    async def _fetch_quote(self, request: QuoteRequest) -> CatalogQuote:
        """
        Get the catalog quote for a request.

        Raises:
            SkuNotFound: The provider does not know a requested SKU
            PricingError: The call failed or returned no usable quote
        """
        try:
            quote = await self.catalog.get_quote(request)
        except CatalogNotFoundError as e:
            logger.error(f"Catalog rejected SKU(s) {[i.sku for i in request.items]}: {e}")
            raise SkuNotFound(f"Product unavailable: {e.message}")
        except CatalogValidationError as e:
            logger.error(f"Catalog rejected quote request: {e}")
            raise PricingError(
                f"Quote request rejected: {e.message}",
                details=e.to_dict(),
                retryable=False,
            )
        except CatalogAPIError as e:
            logger.error(f"Catalog quote failed: {e}")
            raise PricingError(
                f"Failed to get quote: {e.message}",
                details=e.to_dict(),
                retryable=e.is_retryable(),
            )

        if quote is None or not quote.lines:
            raise PricingError(
                f"No quotes available for {request.destination_country} "
                f"({request.shipping_method})",
                details={"destination": request.destination_country, "items": len(request.items)},
                retryable=False,
            )
        return quote

    async def _lines_in_currency(self, lines: Sequence[QuoteLine], currency: str) -> List[QuoteLine]:
        """Express every quote line in one currency."""
        rates: Dict[str, float] = {}
        converted = []
        for line in lines:
            source = line.currency.upper()
            if source == currency:
                converted.append(line)
                continue
            if source not in rates:
                rates[source] = await self.currency_service.get_rate(source, currency)
            converted.append(replace(line, unit_cost=line.unit_cost * rates[source], currency=currency))
        return converted

    async def _quote_and_match(
        self,
        items: Sequence[CartItem],
        destination_country: str,
        shipping_method: str,
    ) -> Tuple[List[CartItem], CatalogQuote, MatchResult]:
        resolved, attributes = self.prepare_items(items)
        request = self.build_quote_request(resolved, attributes, destination_country, shipping_method)
        logger.info(
            f"Requesting {shipping_method} quote for {len(resolved)} cart item(s) "
            f"as {len(request.items)} request item(s) to {destination_country}"
        )

        quote = await self._fetch_quote(request)
        lines = await self._lines_in_currency(quote.lines, quote.currency)
        result = match(resolved, lines, attributes)

        if not result.item_prices:
            raise PricingError(
                "No quote lines matched any cart item",
                details={"warnings": [w.to_dict() for w in result.warnings]},
                retryable=False,
            )
        return resolved, quote, result

    # =========================================================================
    # Pricing
    # =========================================================================

    async def calculate_pricing(
        self,
        items: Sequence[CartItem],
        destination_country: str,
        shipping_method: str = DEFAULT_SHIPPING_METHOD,
        currency: Optional[str] = None,
    ) -> PricingResult:
        """
        Calculate reconciled pricing for a cart.

        Args:
            items: Cart items, in cart order
            destination_country: Destination ISO country code
            shipping_method: Budget, Standard, Express or Overnight
            currency: Result currency (defaults to the quote currency)

        Returns:
            PricingResult; is_estimated is set when any item was averaged or
            left unmatched

        Raises:
            ValidationError: Malformed cart, destination, method or currency
            SkuNotFound: An item has no resolvable SKU
            PricingError: The provider call failed or timed out, nothing in the
                cart could be priced, or no exchange rate exists for currency
        """
        validate_cart(items)
        destination = validate_destination(destination_country)
        method = canonical_shipping_method(shipping_method)
        currency = validate_currency(currency)

        try:
            return await asyncio.wait_for(
                self._calculate_pricing(items, destination, method, currency),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Pricing calculation timed out after {self.timeout}s")
            raise PricingError(
                f"Pricing calculation timed out after {self.timeout}s",
                details={"timeout": self.timeout},
                retryable=True,
            )
        except CurrencyError as e:
            raise PricingError(
                f"Currency conversion unavailable: {e.message}",
                details=e.details,
                retryable=False,
            )

    async def _calculate_pricing(
        self,
        items: Sequence[CartItem],
        destination: str,
        method: str,
        currency: Optional[str],
    ) -> PricingResult:
        if currency:
            # Unknown currencies fail before the provider is called
            await self.currency_service.get_rate("USD", currency)
        resolved, quote, matched = await self._quote_and_match(items, destination, method)

        target = (currency or quote.currency).upper()
        rate = await self.currency_service.get_rate(quote.currency, target)

        item_prices: Dict[int, ItemPrice] = {
            index: replace(price, unit_cost=round_money(price.unit_cost * rate, target))
            for index, price in matched.item_prices.items()
        }
        subtotal = round_money(
            sum(price.unit_cost * resolved[index].quantity for index, price in item_prices.items()),
            target,
        )

        if not matched.is_estimated:
            provider_subtotal = round_money(quote.items_cost * rate, target)
            if abs(provider_subtotal - subtotal) > self.tolerance:
                logger.warning(
                    f"Matched subtotal {subtotal} differs from provider items cost "
                    f"{provider_subtotal} {target}"
                )

        shipping = round_money(quote.shipping_cost * rate, target)
        tax = round_money(self.tax_policy.calculate(subtotal, destination), target)
        total = round_money(subtotal + tax + shipping, target)

        delivery = estimate_delivery(destination, quote.shipment_method, origin_country=quote.origin_country)

        result = PricingResult(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=total,
            currency=target,
            item_prices=item_prices,
            unmatched=list(matched.unmatched),
            warnings=list(matched.warnings),
            shipping_method=quote.shipment_method,
            original_currency=quote.currency if target != quote.currency else None,
            exchange_rate=rate if target != quote.currency else None,
            estimated_days=delivery.max,
        )

        logger.info(
            f"Priced {len(item_prices)}/{len(resolved)} item(s): subtotal {subtotal} + tax {tax} "
            f"+ shipping {shipping} = {total} {target}"
            + (" (estimated)" if result.is_estimated else "")
        )
        return result

    # =========================================================================
    # Price Validation
    # =========================================================================

    async def validate_prices(
        self,
        items: Sequence[CartItem],
        destination_country: str,
        threshold_percent: Optional[float] = None,
    ) -> PriceValidationResult:
        """
        Compare each item's quoted unit cost with its catalogue price.

        Items whose quoted price differs from original_price by more than
        threshold_percent are reported. Unmatched items are skipped.
        """
        validate_cart(items)
        destination = validate_destination(destination_country)
        threshold = (
            threshold_percent if threshold_percent is not None else PRICE_VALIDATION_THRESHOLD_PERCENT
        )

        resolved, quote, matched = await self._quote_and_match(items, destination, DEFAULT_SHIPPING_METHOD)

        mismatches = []
        for index, price in sorted(matched.item_prices.items()):
            item = resolved[index]
            rate = await self.currency_service.get_rate(quote.currency, item.currency)
            quoted = round_money(price.unit_cost * rate, item.currency)
            catalog_price = item.original_price or 0.0
            difference = round_money(quoted - catalog_price, item.currency)
            if catalog_price > 0:
                percent = abs(difference) / catalog_price * 100
            else:
                percent = 0.0 if quoted == 0 else 100.0

            if percent > threshold:
                logger.warning(
                    f"Price drift for {item.id} ({item.sku}): catalogue {catalog_price}, "
                    f"quoted {quoted} {item.currency} ({percent:.1f}%)"
                )
                mismatches.append(PriceMismatch(
                    item_id=item.id,
                    sku=item.sku,
                    catalog_price=catalog_price,
                    quoted_price=quoted,
                    difference=difference,
                    percent_difference=round(percent, 2),
                ))

        return PriceValidationResult(is_valid=not mismatches, mismatches=mismatches)
