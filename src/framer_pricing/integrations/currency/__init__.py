"""Currency conversion with live exchange rates."""

from framer_pricing.integrations.currency.client import CurrencyService

__all__ = [
    "CurrencyService",
]
