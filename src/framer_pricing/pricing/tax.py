"""Destination tax policy."""

import logging
from typing import Dict, Mapping, Optional

from framer_pricing.core.config import TAX_RATES

logger = logging.getLogger(__name__)


class TaxPolicy:
    """
    Flat destination-rate tax on the item subtotal.

    Swap in a different policy (anything with calculate(subtotal, country))
    to delegate to an external tax service.
    """

    def __init__(self, rates: Optional[Mapping[str, float]] = None):
        self.rates: Dict[str, float] = {
            k.upper(): v for k, v in (rates if rates is not None else TAX_RATES).items()
        }

    def rate_for(self, country_code: str) -> float:
        return self.rates.get((country_code or "").upper(), 0.0)

    def calculate(self, subtotal: float, country_code: str) -> float:
        rate = self.rate_for(country_code)
        if rate == 0.0:
            logger.debug(f"No tax rate configured for {country_code}")
        return subtotal * rate
