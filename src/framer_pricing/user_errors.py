"""
User-friendly error messages.

Converts pricing/shipping/client exceptions into the
{title, message, action, retryable} structure the checkout UI renders.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from framer_pricing.core.errors import (
    CurrencyError,
    FramerPricingError,
    PricingError,
    ShippingError,
    SkuNotFound,
    ValidationError,
)
from framer_pricing.integrations.prodigi.client import (
    CatalogAPIError,
    CatalogNotFoundError,
    CatalogRateLimitError,
    CatalogTimeoutError,
    CatalogValidationError,
)


@dataclass(frozen=True)
class UserFriendlyError:
    title: str
    message: str
    action: Optional[str]
    retryable: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


RATE_LIMITED = UserFriendlyError(
    title="Please wait a moment",
    message="We're processing many requests right now. Please wait a moment and try again.",
    action="Try again in a few seconds",
    retryable=True,
)

PRODUCT_UNAVAILABLE = UserFriendlyError(
    title="Product unavailable",
    message=(
        "This product is currently unavailable in the selected configuration. "
        "Please try a different size or style."
    ),
    action="Try a different option",
    retryable=False,
)

SHIPPING_UNAVAILABLE = UserFriendlyError(
    title="Shipping unavailable",
    message="Shipping is not available to this location. Please try a different address or contact support.",
    action="Try a different address",
    retryable=False,
)

INVALID_CONFIGURATION = UserFriendlyError(
    title="Invalid configuration",
    message="There was an issue with your selection. Please try different options.",
    action="Try again",
    retryable=True,
)

NOT_FOUND = UserFriendlyError(
    title="Not found",
    message="The requested item could not be found. It may have been removed or is temporarily unavailable.",
    action="Try searching again",
    retryable=False,
)

TIMED_OUT = UserFriendlyError(
    title="Request timed out",
    message="The request took too long to complete. Please check your connection and try again.",
    action="Try again",
    retryable=True,
)

CONNECTION_ERROR = UserFriendlyError(
    title="Connection error",
    message="Unable to connect to our servers. Please check your internet connection and try again.",
    action="Check connection and try again",
    retryable=True,
)

PRICE_UNAVAILABLE = UserFriendlyError(
    title="Price unavailable",
    message="We couldn't calculate the price in your currency. Please try again or contact support.",
    action="Try again",
    retryable=True,
)

GENERIC_ERROR = UserFriendlyError(
    title="Something went wrong",
    message="An unexpected error occurred. Please try again or contact support if the problem persists.",
    action="Try again",
    retryable=True,
)


def _from_catalog_error(error: CatalogAPIError) -> Optional[UserFriendlyError]:
    if isinstance(error, CatalogRateLimitError):
        return RATE_LIMITED

    if isinstance(error, CatalogValidationError):
        message = error.message.lower()
        if "product not available" in message or "sku not found" in message:
            return PRODUCT_UNAVAILABLE
        if "shipping" in message or "destination" in message:
            return SHIPPING_UNAVAILABLE
        return INVALID_CONFIGURATION

    if isinstance(error, CatalogNotFoundError):
        return NOT_FOUND

    if isinstance(error, CatalogTimeoutError):
        return TIMED_OUT

    return None


def _from_status(status_code: Optional[int]) -> Optional[UserFriendlyError]:
    if status_code == 429:
        return RATE_LIMITED
    if status_code == 404:
        return NOT_FOUND
    return None


def _from_message(message: str) -> Optional[UserFriendlyError]:
    message = message.lower()
    if "timeout" in message or "timed out" in message:
        return TIMED_OUT
    if "network" in message or "connection" in message or "request failed" in message:
        return CONNECTION_ERROR
    if "currency" in message or "conversion" in message:
        return PRICE_UNAVAILABLE
    return None


def get_user_friendly_error(error: BaseException) -> UserFriendlyError:
    """
    Convert a technical error into a user-friendly message.

    Args:
        error: Any exception raised by pricing, shipping or the clients

    Returns:
        UserFriendlyError for the checkout UI
    """
    if isinstance(error, ValidationError):
        fields = ", ".join(error.fields) or "your details"
        return UserFriendlyError(
            title="Please check your details",
            message=f"Some information is missing or invalid: {fields}.",
            action="Correct the highlighted fields",
            retryable=False,
        )

    if isinstance(error, SkuNotFound):
        return PRODUCT_UNAVAILABLE

    if isinstance(error, CurrencyError):
        return PRICE_UNAVAILABLE

    if isinstance(error, CatalogAPIError):
        friendly = _from_catalog_error(error) or _from_status(error.status_code)
        if friendly:
            return friendly

    if isinstance(error, (PricingError, ShippingError)):
        friendly = _from_status(error.details.get("status_code")) or _from_message(error.message)
        if friendly:
            return friendly
        if isinstance(error, ShippingError) and not error.retryable:
            return SHIPPING_UNAVAILABLE
        if not error.retryable:
            return PRODUCT_UNAVAILABLE

    friendly = _from_message(str(error))
    if friendly:
        return friendly

    if isinstance(error, FramerPricingError):
        return UserFriendlyError(
            title=GENERIC_ERROR.title,
            message=GENERIC_ERROR.message,
            action=GENERIC_ERROR.action,
            retryable=error.retryable,
        )
    return GENERIC_ERROR


def is_retryable_error(error: BaseException) -> bool:
    return get_user_friendly_error(error).retryable
