"""
Quote Matcher

Reconciles provider quote lines to cart items. This is a pure,
synchronous, single pass over the already-fetched quote lines:

1. Each cart item and each quote line gets a key: (base SKU, sorted
   normalized attributes).
2. Cart items are visited in cart order. An exact key hit consumes
   `quantity` copies from the first line with that key that still has
   enough copies left, so two cart items sharing a SKU each get their own
   line. Identical keys are merged into one request item whose line echoes
   the summed copies, so every merged item is served exactly. A line that
   echoes no attributes stands in for the exact key when the cart holds
   only one attribute variant of that SKU.
3. Exact key, but its lines cover fewer copies than the cart holds: the
   average of that key's lines, as an EstimatedPrice.
4. No exact key, but the SKU is quoted: the unweighted average of every
   line for that SKU, as an EstimatedPrice.
5. SKU not quoted at all: the item is unmatched and left out of the
   subtotal. It is reported, never zero-priced.

Mappings are built in list order, so the same inputs always produce the
same result.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from framer_pricing.core.normalizer import attribute_key
from framer_pricing.core.schema import (
    CartItem,
    EstimatedPrice,
    ExactPrice,
    ItemPrice,
    QuoteLine,
    QuoteMismatch,
)
from framer_pricing.pricing.attributes import build_attributes
from framer_pricing.pricing.sku import extract_base_sku

logger = logging.getLogger(__name__)

MatchKey = Tuple[str, tuple]


@dataclass
class MatchResult:
    """Per-item prices plus the items that could not be matched 1:1."""
    item_prices: Dict[int, ItemPrice] = field(default_factory=dict)
    unmatched: List[int] = field(default_factory=list)
    warnings: List[QuoteMismatch] = field(default_factory=list)

    @property
    def is_estimated(self) -> bool:
        return bool(self.unmatched) or any(p.is_estimated for p in self.item_prices.values())


def normalize_sku(sku: str) -> str:
    return extract_base_sku((sku or "").strip()).lower()


def match_key(sku: str, attributes: Optional[Mapping[str, str]]) -> MatchKey:
    return normalize_sku(sku), attribute_key(attributes)


def match(
    cart_items: Sequence[CartItem],
    quote_lines: Sequence[QuoteLine],
    item_attributes: Optional[Sequence[Mapping[str, str]]] = None,
) -> MatchResult:
    """
    Match quote lines to cart items.

    Args:
        cart_items: Cart items with resolved SKUs, in cart order
        quote_lines: Lines from one provider quote, all in one currency
        item_attributes: Normalized attributes per cart item; derived from
            each item's frame configuration when omitted

    Returns:
        MatchResult keyed by cart-item index
    """
    if item_attributes is not None and len(item_attributes) != len(cart_items):
        raise ValueError("item_attributes must have one entry per cart item")

    # key -> [[line, copies remaining], ...] in quote order
    available: Dict[MatchKey, List[list]] = OrderedDict()
    by_sku: Dict[str, List[float]] = OrderedDict()
    for line in quote_lines:
        key = match_key(line.sku, line.attributes)
        available.setdefault(key, []).append([line, max(line.copies, 1)])
        by_sku.setdefault(key[0], []).append(line.unit_cost)

    keys: List[MatchKey] = []
    variants: Dict[str, set] = {}
    for index, item in enumerate(cart_items):
        if item_attributes is not None:
            attributes = item_attributes[index]
        else:
            attributes = build_attributes(item.frame_config, item.sku)
        key = match_key(item.sku, attributes)
        keys.append(key)
        variants.setdefault(key[0], set()).add(key[1])

    result = MatchResult()

    for index, item in enumerate(cart_items):
        key = keys[index]
        slots = available.get(key)
        if not slots and len(variants[key[0]]) == 1:
            slots = available.get((key[0], ()))
        if slots:
            slot = next((s for s in slots if s[1] >= item.quantity), None)
            if slot is not None:
                slot[1] -= item.quantity
                result.item_prices[index] = ExactPrice(slot[0].unit_cost)
                continue
            costs = [s[0].unit_cost for s in slots]
            detail = f"Quote covers fewer copies than the cart; averaged {len(costs)} line(s)"
        else:
            costs = by_sku.get(key[0]) or []
            detail = f"Averaged {len(costs)} quote line(s) sharing the SKU"

        if costs:
            logger.warning(
                f"No exact quote line for cart item {index} ({item.sku}); "
                f"using average price for cart item {index}"
            )
            result.item_prices[index] = EstimatedPrice(sum(costs) / len(costs))
            result.warnings.append(QuoteMismatch(
                cart_index=index,
                sku=item.sku,
                reason="averaged",
                detail=detail,
            ))
            continue

        logger.warning(f"No quote line for cart item {index} ({item.sku}); excluded from subtotal")
        result.unmatched.append(index)
        result.warnings.append(QuoteMismatch(
            cart_index=index,
            sku=item.sku,
            reason="unmatched",
            detail="No quote line shares the SKU",
        ))

    return result
