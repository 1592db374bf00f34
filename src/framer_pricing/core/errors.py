"""
Error taxonomy for pricing and shipping.

- SkuNotFound: no catalog SKU for the configuration (user must change it)
- PricingError / ShippingError: provider call failed (usually retryable)
- ValidationError: malformed cart or address input, raised before any I/O
- CurrencyError: no exchange rate for the requested currency

Matching ambiguity is not an error: it degrades to an estimated price and
is reported as a QuoteMismatch record on the result (see schema.py).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FieldError:
    """A single invalid input field."""
    field: str
    message: str


class FramerPricingError(Exception):
    """Base class for all pricing/shipping errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        retryable: Optional[bool] = None,
    ):
        self.message = message
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable
        super().__init__(self.message)


class SkuNotFound(FramerPricingError):
    """No resolvable catalog SKU for a frame configuration."""

    def __init__(self, message: str, frame_config: Any = None, best_score: Optional[float] = None):
        self.frame_config = frame_config
        self.best_score = best_score
        super().__init__(
            message,
            details={"best_score": best_score},
            retryable=False,
        )


class PricingError(FramerPricingError):
    """The provider quote call failed, or produced nothing usable."""

    retryable = True


class ShippingError(FramerPricingError):
    """The provider shipping call failed."""

    retryable = True


class CurrencyError(FramerPricingError):
    """No exchange rate is known for a currency."""

    def __init__(self, message: str, currency: Optional[str] = None):
        self.currency = currency
        super().__init__(message, details={"currency": currency}, retryable=False)


class ValidationError(FramerPricingError):
    """Malformed input, with field-level detail."""

    def __init__(self, message: str, errors: Optional[List[FieldError]] = None):
        self.errors = list(errors or [])
        super().__init__(
            message,
            details={"errors": [{"field": e.field, "message": e.message} for e in self.errors]},
            retryable=False,
        )

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]
