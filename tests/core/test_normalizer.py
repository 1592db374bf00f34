"""Tests for the attribute normalizer."""

import pytest
from framer_pricing.core.normalizer import attribute_key, normalize_attributes


def test_mount_color_casing_collapses():
    """mountColor, MountColor and mountcolor are the same attribute."""
    for key in ("mountColor", "MountColor", "mountcolor", "mount_color"):
        assert normalize_attributes({key: "Snow White"}) == {"mountColor": "snow-white"}


def test_colour_variants_are_canonical():
    """Grey/gray spellings map to one canonical value."""
    for value in ("dark grey", "Dark Gray", "dark-gray", " DARK  GREY "):
        assert normalize_attributes({"color": value}) == {"color": "dark-grey"}


def test_wrap_casing_matches_quote_echo():
    """Products endpoint casing and quote casing normalize the same."""
    assert normalize_attributes({"wrap": "ImageWrap"}) == normalize_attributes({"wrap": "imagewrap"})


def test_empty_values_are_dropped():
    """Blank and None values should not produce keys."""
    assert normalize_attributes({"color": "", "mount": None, "glaze": "  "}) == {}


def test_unknown_keys_pass_through():
    """Attributes we have no alias for are kept (lower-cased)."""
    assert normalize_attributes({"Frame": "Classic"}) == {"frame": "classic"}


def test_colliding_keys_resolve_independent_of_insertion_order():
    """When two keys collapse together, the winner does not depend on dict order."""
    first = normalize_attributes({"mountColor": "black", "mountcolor": "white"})
    second = normalize_attributes({"mountcolor": "white", "mountColor": "black"})

    assert first == second
    assert len(first) == 1


@pytest.mark.parametrize("raw", [
    {},
    {"mountColor": "Snow White", "mountcolor": "Black"},
    {"MountColour": "Off White", "Colour": "Light Gray", "glaze": "Acrylic"},
    {"wrap": "Image Wrap", "PaperType": "EMA", "finish": "High Gloss"},
    {"mount": "2.0 mm", "substrate_weight": "1.4 mm", "edge": "38mm"},
])
def test_normalize_is_idempotent(raw):
    """normalize(normalize(x)) == normalize(x)."""
    once = normalize_attributes(raw)
    assert normalize_attributes(once) == once


def test_attribute_key_is_order_independent():
    """Lookup keys should not depend on attribute order or casing."""
    a = attribute_key({"color": "Black", "mountColor": "Snow White"})
    b = attribute_key({"mountcolor": "snow white", "Color": "black"})
    assert a == b
