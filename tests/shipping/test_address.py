"""Tests for shipping address validation."""

import pytest

from framer_pricing.core.errors import ValidationError
from framer_pricing.core.schema import ShippingAddress
from framer_pricing.shipping.address import address_errors, validate_shipping_address


def test_valid_us_address(us_address):
    assert address_errors(us_address) == []
    assert validate_shipping_address(us_address).country_code == "US"


def test_empty_country_code_is_named():
    """An empty countryCode fails before any provider call, naming the field."""
    address = ShippingAddress(address1="1 High Street", city="London", zip="SW1A 1AA", country_code="")

    with pytest.raises(ValidationError) as exc_info:
        validate_shipping_address(address)

    assert exc_info.value.fields == ["countryCode"]
    assert "countryCode" in exc_info.value.message


def test_us_requires_zip_and_state(us_address):
    us_address.zip = ""
    us_address.state = None

    with pytest.raises(ValidationError) as exc_info:
        validate_shipping_address(us_address)

    assert exc_info.value.fields == ["zip", "state"]


def test_all_problems_reported_at_once():
    errors = address_errors(ShippingAddress(country_code="USA"))
    assert [e.field for e in errors] == ["countryCode", "address1", "city"]


def test_country_code_is_upper_cased_without_mutating_input():
    address = ShippingAddress(address1="1 High Street", city="London", zip="SW1A 1AA", country_code=" gb ")

    validated = validate_shipping_address(address)

    assert validated.country_code == "GB"
    assert address.country_code == " gb "


def test_state_not_needed_outside_us_ca_au():
    address = ShippingAddress(address1="Hauptstrasse 5", city="Berlin", zip="10115", country_code="DE")
    assert address_errors(address) == []
