"""Cart preparation and quote request shaping, shared by pricing and shipping."""

import logging
from collections import OrderedDict
from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from framer_pricing.core.schema import CartItem, QuoteRequest, QuoteRequestItem
from framer_pricing.pricing.attributes import build_attributes
from framer_pricing.pricing.matcher import match_key
from framer_pricing.pricing.sku import SkuResolver, extract_base_sku

logger = logging.getLogger(__name__)


def prepare_cart_items(
    items: Sequence[CartItem],
    resolver: SkuResolver,
) -> Tuple[List[CartItem], List[Dict[str, str]]]:
    """
    Resolve SKUs and build normalized attributes for every cart item.

    Returns:
        (items carrying base SKUs, attributes per item), both in cart order

    Raises:
        SkuNotFound: If an item has no SKU and none can be resolved
    """
    resolved: List[CartItem] = []
    attributes: List[Dict[str, str]] = []
    for index, item in enumerate(items):
        sku = item.sku
        if not sku:
            sku = resolver.resolve(item.frame_config)
            logger.debug(f"Cart item {index} resolved to SKU {sku}")
        sku = extract_base_sku(sku)
        if sku != item.sku:
            item = replace(item, sku=sku)
        resolved.append(item)
        attributes.append(build_attributes(item.frame_config, sku))
    return resolved, attributes


def build_quote_request(
    items: Sequence[CartItem],
    attributes: Sequence[Dict[str, str]],
    destination_country: str,
    shipping_method: str = "Standard",
) -> QuoteRequest:
    """
    One request item per unique (sku, attributes), in first-seen cart order.

    Quantities of cart items sharing a key are summed into the copies of a
    single request item.
    """
    grouped: "OrderedDict[tuple, list]" = OrderedDict()
    for item, attrs in zip(items, attributes):
        key = match_key(item.sku, attrs)
        if key in grouped:
            grouped[key][2] += item.quantity
        else:
            grouped[key] = [item.sku, dict(attrs), item.quantity]

    return QuoteRequest(
        items=[
            QuoteRequestItem(sku=sku, attributes=attrs, copies=copies)
            for sku, attrs, copies in grouped.values()
        ],
        destination_country=destination_country,
        shipping_method=shipping_method,
    )
