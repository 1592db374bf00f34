#!/usr/bin/env python3
"""
Prodigi Data Transformer for Quotes.

This module shapes quote requests for the Prodigi v4 API and parses its
quote responses back into CatalogQuote / QuoteLine value objects.

Key Functions:
- build_quote_payload: QuoteRequest -> POST /quotes body
- parse_quote_response: POST /quotes response -> List[CatalogQuote]
- select_quote: pick the quote for a shipping method
- parse_amount: tolerant parsing of Prodigi's string amounts
- parse_unit_cost: strict parsing of a quote item's unit cost
"""

import logging
from typing import Any, Dict, List, Optional

from framer_pricing.core.normalizer import normalize_attributes
from framer_pricing.core.schema import CatalogQuote, QuoteLine, QuoteRequest
from framer_pricing.integrations.prodigi.config import DEFAULT_PRINT_AREA, DEFAULT_SHIPPING_METHOD

logger = logging.getLogger(__name__)


# =============================================================================
# Request Shaping
# =============================================================================

def build_quote_payload(request: QuoteRequest, shipping_method: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the POST /quotes body for a quote request.

    Attributes are only included when non-empty (Prodigi rejects an empty
    attributes object for some products). Assets only need a print area
    for quotes; URLs are an order-time concern.

    Args:
        request: Quote request with distinct (sku, attributes) items
        shipping_method: Overrides request.shipping_method

    Returns:
        JSON-ready payload
    """
    items = []
    for item in request.items:
        payload_item: Dict[str, Any] = {
            "sku": item.sku,
            "copies": item.copies,
            "assets": [{"printArea": DEFAULT_PRINT_AREA}],
        }
        attributes = {k: v for k, v in item.attributes.items() if v}
        if attributes:
            payload_item["attributes"] = attributes
        items.append(payload_item)

    return {
        "shippingMethod": shipping_method or request.shipping_method or DEFAULT_SHIPPING_METHOD,
        "destinationCountryCode": request.destination_country.upper(),
        "items": items,
    }


# =============================================================================
# Response Parsing
# =============================================================================

def parse_amount(cost: Optional[Dict[str, Any]]) -> float:
    """Parse a Prodigi cost object ({"amount": "12.50", "currency": "USD"})."""
    if not cost:
        return 0.0
    try:
        return float(cost.get("amount") or 0)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable amount in cost object: {cost}")
        return 0.0


def parse_unit_cost(cost: Optional[Dict[str, Any]]) -> Optional[float]:
    """
    Parse a quote item's unitCost. Unlike parse_amount, a missing or
    unparseable amount is None, never 0.0.
    """
    if not isinstance(cost, dict) or cost.get("amount") in (None, ""):
        return None
    try:
        return float(cost["amount"])
    except (TypeError, ValueError):
        return None


def _parse_currency(cost: Optional[Dict[str, Any]], default: str = "USD") -> str:
    if not cost or not cost.get("currency"):
        return default
    return str(cost["currency"]).upper()


def parse_quote(quote: Dict[str, Any]) -> CatalogQuote:
    """
    Parse one quote object from a POST /quotes response.

    Returns:
        CatalogQuote with normalized quote lines
    """
    cost_summary = quote.get("costSummary") or {}
    items_cost = cost_summary.get("items")
    currency = _parse_currency(items_cost)

    lines = []
    for item in quote.get("items") or []:
        unit_cost = item.get("unitCost")
        sku = str(item.get("sku") or "").strip()
        if not sku:
            logger.warning(f"Skipping quote item without SKU: {item}")
            continue
        amount = parse_unit_cost(unit_cost)
        if amount is None:
            logger.warning(f"Skipping quote item {sku} without a usable unitCost: {unit_cost}")
            continue
        lines.append(QuoteLine(
            sku=sku,
            attributes=normalize_attributes(item.get("attributes")),
            unit_cost=amount,
            currency=_parse_currency(unit_cost, default=currency),
            copies=int(item.get("copies") or 1),
        ))

    origin_country = None
    for shipment in quote.get("shipments") or []:
        location = shipment.get("fulfillmentLocation") or {}
        if location.get("countryCode"):
            origin_country = str(location["countryCode"]).upper()
            break

    return CatalogQuote(
        shipment_method=quote.get("shipmentMethod") or DEFAULT_SHIPPING_METHOD,
        lines=lines,
        items_cost=parse_amount(items_cost),
        shipping_cost=parse_amount(cost_summary.get("shipping")),
        currency=currency,
        origin_country=origin_country,
    )


def parse_quote_response(data: Dict[str, Any]) -> List[CatalogQuote]:
    """
    Parse a POST /quotes response.

    An outcome of "NotAvailable" or a missing quotes array is an empty
    result, not an error: the caller decides how to degrade.
    """
    outcome = data.get("outcome")
    issues = data.get("issues") or []
    if issues:
        logger.warning(f"Prodigi quote outcome {outcome} with issues: {issues}")

    if outcome == "NotAvailable":
        return []

    return [parse_quote(q) for q in data.get("quotes") or []]


def select_quote(quotes: List[CatalogQuote], shipping_method: str) -> Optional[CatalogQuote]:
    """
    Find the quote for a shipping method (case-insensitive), falling back
    to Standard and then to the first quote.
    """
    if not quotes:
        return None

    wanted = (shipping_method or "").lower()
    for quote in quotes:
        if quote.shipment_method.lower() == wanted:
            return quote

    for quote in quotes:
        if quote.shipment_method.lower() == DEFAULT_SHIPPING_METHOD.lower():
            logger.info(f"No {shipping_method} quote; using {DEFAULT_SHIPPING_METHOD}")
            return quote

    logger.info(f"No {shipping_method} quote; using {quotes[0].shipment_method}")
    return quotes[0]
