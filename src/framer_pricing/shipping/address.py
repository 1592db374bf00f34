"""
Shipping address validation.

Runs before any network call; every problem is collected so the checkout
form can highlight all invalid fields at once.
"""

from dataclasses import replace
from typing import List

from framer_pricing.core.errors import FieldError, ValidationError
from framer_pricing.core.schema import ShippingAddress

ZIP_REQUIRED_COUNTRIES = ("US", "CA", "GB", "AU", "DE", "FR", "IT", "ES", "NL", "BE", "AT", "PT")
STATE_REQUIRED_COUNTRIES = ("US", "CA", "AU")


def address_errors(address: ShippingAddress) -> List[FieldError]:
    """All field-level problems with an address (empty when valid)."""
    errors: List[FieldError] = []
    country = (address.country_code or "").strip().upper()

    if not country:
        errors.append(FieldError("countryCode", "Country code is required"))
    elif len(country) != 2 or not country.isalpha():
        errors.append(FieldError("countryCode", "Country code must be a 2-letter ISO code"))

    if len((address.address1 or "").strip()) < 3:
        errors.append(FieldError("address1", "Street address is required"))

    if len((address.city or "").strip()) < 2:
        errors.append(FieldError("city", "City is required"))

    if country in ZIP_REQUIRED_COUNTRIES and len((address.zip or "").strip()) < 3:
        errors.append(FieldError("zip", f"Postal code is required for {country}"))

    if country in STATE_REQUIRED_COUNTRIES and len((address.state or "").strip()) < 2:
        errors.append(FieldError("state", f"State/province is required for {country}"))

    return errors


def validate_shipping_address(address: ShippingAddress) -> ShippingAddress:
    """
    Validate address completeness.

    Returns:
        The address with a normalized (upper-case) country code

    Raises:
        ValidationError: Naming every invalid field
    """
    errors = address_errors(address)
    if errors:
        fields = ", ".join(e.field for e in errors)
        raise ValidationError(f"Invalid shipping address: {fields}", errors=errors)

    return replace(address, country_code=address.country_code.strip().upper())
