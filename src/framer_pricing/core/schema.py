"""
Value objects for the pricing and shipping pipeline.

Every object here is request-scoped: it is built fresh for one pricing or
shipping calculation and never shared between carts. Only CartItem has a
life outside a calculation, and it is owned by the cart store.

Key Design Principles:
1. Python attributes are snake_case; to_dict()/from_dict() speak the
   camelCase shape the checkout UI consumes.
2. Item prices are a tagged variant (ExactPrice / EstimatedPrice) so every
   consumer has to decide how to render an estimate.
3. Money is float, rounded to the currency's minor unit at the boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from framer_pricing.core.config import round_money
from framer_pricing.core.errors import FieldError, ValidationError


# ============================================================================
# CART
# ============================================================================

# camelCase (UI) -> snake_case (Python) for frame configuration keys
_FRAME_CONFIG_KEYS = {
    "size": "size",
    "color": "color",
    "style": "style",
    "material": "material",
    "wrap": "wrap",
    "glaze": "glaze",
    "mount": "mount",
    "mountcolor": "mount_color",
    "mount_color": "mount_color",
    "papertype": "paper_type",
    "paper_type": "paper_type",
    "finish": "finish",
    "edge": "edge",
    "producttype": "product_type",
    "product_type": "product_type",
    "canvastype": "canvas_type",
    "canvas_type": "canvas_type",
}


def _parse_quantity(value: Any) -> Any:
    """Whole-number quantities as int; anything else is left for CartItem to reject."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


@dataclass
class FrameConfig:
    """
    User-chosen attributes describing one custom product.

    `size` is in inches ("16x20"). `edge` is "19mm" (slim) or "38mm"
    (standard) and only matters for canvas products.
    """
    size: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None
    material: Optional[str] = None
    wrap: Optional[str] = None
    glaze: Optional[str] = None
    mount: Optional[str] = None
    mount_color: Optional[str] = None
    paper_type: Optional[str] = None
    finish: Optional[str] = None
    edge: Optional[str] = None
    product_type: Optional[str] = None
    canvas_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FrameConfig":
        """Build from a UI payload; key casing is not significant."""
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            target = _FRAME_CONFIG_KEYS.get(str(key).lower())
            if target and value is not None:
                values[target] = str(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "color": self.color,
            "style": self.style,
            "material": self.material,
            "wrap": self.wrap,
            "glaze": self.glaze,
            "mount": self.mount,
            "mountColor": self.mount_color,
            "paperType": self.paper_type,
            "finish": self.finish,
            "edge": self.edge,
            "productType": self.product_type,
            "canvasType": self.canvas_type,
        }


@dataclass
class CartItem:
    """One line of the cart. `sku` may be empty until resolved."""
    id: str
    product_id: str
    sku: str
    quantity: int
    price: float
    original_price: Optional[float] = None
    currency: str = "USD"
    frame_config: FrameConfig = field(default_factory=FrameConfig)

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValidationError(
                f"Cart item {self.id} has invalid quantity {self.quantity!r}",
                errors=[FieldError("quantity", "Quantity must be a whole number of at least 1")],
            )
        if self.original_price is None:
            self.original_price = self.price

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "CartItem":
        return cls(
            id=str(data.get("id") or f"item-{index}"),
            product_id=str(data.get("productId") or data.get("product_id") or f"item-{index}"),
            sku=str(data.get("sku") or ""),
            quantity=_parse_quantity(data.get("quantity", 1)),
            price=float(data.get("price", 0.0)),
            original_price=(
                float(data["originalPrice"]) if data.get("originalPrice") is not None else None
            ),
            currency=str(data.get("currency") or "USD"),
            frame_config=FrameConfig.from_dict(data.get("frameConfig") or data.get("frame_config")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "sku": self.sku,
            "quantity": self.quantity,
            "price": self.price,
            "originalPrice": self.original_price,
            "currency": self.currency,
            "frameConfig": self.frame_config.to_dict(),
        }


# ============================================================================
# CATALOG
# ============================================================================

@dataclass(frozen=True)
class CatalogProduct:
    """A catalog entry that may serve as the SKU for a frame configuration."""
    sku: str
    product_type: str
    width: float
    height: float
    edge: Optional[str] = None
    paper_types: Tuple[str, ...] = ()
    size_units: str = "in"


@dataclass(frozen=True)
class QuoteRequestItem:
    """One distinct (sku, attributes) tuple with the summed quantity."""
    sku: str
    attributes: Dict[str, str]
    copies: int


@dataclass
class QuoteRequest:
    """Outbound quote request for one cart. Never reused across carts."""
    items: List[QuoteRequestItem]
    destination_country: str
    shipping_method: str = "Standard"


@dataclass(frozen=True)
class QuoteLine:
    """A single priced entry returned by the provider. Immutable."""
    sku: str
    attributes: Dict[str, str]
    unit_cost: float
    currency: str = "USD"
    copies: int = 1


@dataclass
class CatalogQuote:
    """The provider's quote for one shipping method."""
    shipment_method: str
    lines: List[QuoteLine]
    items_cost: float
    shipping_cost: float
    currency: str = "USD"
    origin_country: Optional[str] = None


# ============================================================================
# PRICING RESULT
# ============================================================================

@dataclass(frozen=True)
class ItemPrice:
    """Matched unit cost for one cart item."""
    unit_cost: float
    is_estimated = False


@dataclass(frozen=True)
class ExactPrice(ItemPrice):
    """Unit cost taken from a quote line matching SKU and attributes."""


@dataclass(frozen=True)
class EstimatedPrice(ItemPrice):
    """Unit cost derived by averaging quote lines that only share the SKU."""
    reason: str = "averaged"
    is_estimated = True


@dataclass(frozen=True)
class QuoteMismatch:
    """
    A cart item that could not be matched 1:1 to a quote line.

    reason is "averaged" (priced from the SKU average) or "unmatched"
    (no quote line shares the SKU; excluded from the subtotal).
    """
    cart_index: int
    sku: str
    reason: str
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cartIndex": self.cart_index,
            "sku": self.sku,
            "reason": self.reason,
            "detail": self.detail,
        }


@dataclass
class PricingResult:
    """
    Reconciled pricing for one cart.

    Invariants:
    - sum(item_prices[i].unit_cost * quantity[i]) == subtotal (within 0.01)
    - total == subtotal + tax + shipping, rounded to the currency
    """
    subtotal: float
    tax: float
    shipping: float
    total: float
    currency: str
    item_prices: Dict[int, ItemPrice] = field(default_factory=dict)
    unmatched: List[int] = field(default_factory=list)
    warnings: List[QuoteMismatch] = field(default_factory=list)
    shipping_method: str = "Standard"
    original_currency: Optional[str] = None
    exchange_rate: Optional[float] = None
    estimated_days: Optional[int] = None

    @property
    def is_estimated(self) -> bool:
        return bool(self.unmatched) or any(p.is_estimated for p in self.item_prices.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "total": self.total,
            "currency": self.currency,
            "itemPrices": {str(i): p.unit_cost for i, p in sorted(self.item_prices.items())},
            "estimatedItems": sorted(i for i, p in self.item_prices.items() if p.is_estimated),
            "unmatchedItems": list(self.unmatched),
            "isEstimated": self.is_estimated,
            "warnings": [w.to_dict() for w in self.warnings],
            "shippingMethod": self.shipping_method,
            "originalCurrency": self.original_currency,
            "exchangeRate": self.exchange_rate,
            "estimatedDays": self.estimated_days,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PricingResult":
        estimated = {int(i) for i in data.get("estimatedItems", [])}
        item_prices: Dict[int, ItemPrice] = {}
        for key, unit_cost in (data.get("itemPrices") or {}).items():
            index = int(key)
            if index in estimated:
                item_prices[index] = EstimatedPrice(float(unit_cost))
            else:
                item_prices[index] = ExactPrice(float(unit_cost))

        currency = data.get("currency", "USD")
        subtotal = float(data.get("subtotal", 0.0))
        tax = float(data.get("tax", 0.0))
        shipping = float(data.get("shipping", 0.0))

        return cls(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=round_money(subtotal + tax + shipping, currency),
            currency=currency,
            item_prices=item_prices,
            unmatched=[int(i) for i in data.get("unmatchedItems", [])],
            warnings=[
                QuoteMismatch(
                    cart_index=int(w["cartIndex"]),
                    sku=w.get("sku", ""),
                    reason=w.get("reason", ""),
                    detail=w.get("detail", ""),
                )
                for w in data.get("warnings", [])
            ],
            shipping_method=data.get("shippingMethod", "Standard"),
            original_currency=data.get("originalCurrency"),
            exchange_rate=data.get("exchangeRate"),
            estimated_days=data.get("estimatedDays"),
        )


@dataclass
class PriceMismatch:
    """A cart item whose quoted price drifted from its catalogue price."""
    item_id: str
    sku: str
    catalog_price: float
    quoted_price: float
    difference: float
    percent_difference: float


@dataclass
class PriceValidationResult:
    is_valid: bool
    mismatches: List[PriceMismatch] = field(default_factory=list)


# ============================================================================
# SHIPPING
# ============================================================================

@dataclass
class ShippingAddress:
    """Standardized destination address"""
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country_code: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShippingAddress":
        return cls(
            address1=data.get("address1") or data.get("line1"),
            address2=data.get("address2") or data.get("line2"),
            city=data.get("city"),
            state=data.get("state"),
            zip=data.get("zip") or data.get("postalCode") or data.get("postal_code"),
            country_code=(
                data.get("countryCode")
                if "countryCode" in data
                else data.get("country_code", data.get("country"))
            ),
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address1": self.address1,
            "address2": self.address2,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "countryCode": self.country_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }


@dataclass
class ShippingCost:
    items: float
    shipping: float
    total: float
    currency: str = "USD"


@dataclass
class DeliveryEstimate:
    """Business-day delivery window."""
    min: int
    max: int

    @property
    def formatted(self) -> str:
        if self.min == self.max:
            return f"{self.min} business day{'s' if self.min != 1 else ''}"
        return f"{self.min}-{self.max} business days"


@dataclass
class ShippingOption:
    """
    One way of shipping the cart.

    provider is "prodigi" for live quotes and "intelligent_fallback" for
    heuristic estimates; is_estimated tells the UI to show a disclaimer.
    """
    method: str
    cost: ShippingCost
    delivery: DeliveryEstimate
    provider: str = "prodigi"
    is_estimated: bool = False
    carrier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "cost": {
                "items": self.cost.items,
                "shipping": self.cost.shipping,
                "total": self.cost.total,
                "currency": self.cost.currency,
            },
            "delivery": {
                "min": self.delivery.min,
                "max": self.delivery.max,
                "formatted": self.delivery.formatted,
            },
            "provider": self.provider,
            "isEstimated": self.is_estimated,
            "carrier": self.carrier,
        }


@dataclass
class ShippingSummary:
    """Options plus the derived recommendation and cost range."""
    options: List[ShippingOption]
    recommended: Optional[ShippingOption]
    cost_range: Optional[Tuple[float, float]]
    is_estimated: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "options": [o.to_dict() for o in self.options],
            "recommended": self.recommended.method if self.recommended else None,
            "costRange": (
                {"min": self.cost_range[0], "max": self.cost_range[1]}
                if self.cost_range else None
            ),
            "isEstimated": self.is_estimated,
        }
