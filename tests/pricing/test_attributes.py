"""Tests for the SKU-heuristic attribute builder."""

from framer_pricing.core.schema import FrameConfig
from framer_pricing.pricing.attributes import build_attributes, sku_traits


def test_canvas_gets_imagewrap_and_nothing_framed():
    """Canvas never sends glaze, mount, edge or frame colour."""
    config = FrameConfig(color="black", glaze="acrylic", mount="2.4mm", edge="38mm")
    attributes = build_attributes(config, "global-can-16x20")

    assert attributes == {"wrap": "imagewrap"}


def test_framed_canvas_keeps_colour():
    attributes = build_attributes(FrameConfig(color="Black"), "global-fra-can-16x20")
    assert attributes == {"color": "black", "wrap": "imagewrap"}


def test_framed_print_attributes():
    config = FrameConfig(color="White", glaze="acrylic", mount="2.4mm", mount_color="Snow White")
    attributes = build_attributes(config, "fra-box-ema-mount2-gla-a3-x")

    assert attributes == {
        "color": "white",
        "glaze": "acrylic-perspex",
        "mount": "2.4mm",
        "mountColor": "snow-white",
    }


def test_none_values_are_dropped():
    config = FrameConfig(glaze="none", mount="none", mount_color="black")
    assert build_attributes(config, "global-cfpm-16x20") == {}


def test_metal_and_acrylic_default_finish():
    assert build_attributes(FrameConfig(), "global-met-16x20") == {"finish": "high-gloss"}
    assert build_attributes(FrameConfig(finish="satin"), "global-acry-16x20") == {"finish": "satin"}


def test_paper_type_only_for_paper_skus():
    config = FrameConfig(paper_type="EMA")
    assert build_attributes(config, "global-fap-12x16") == {"paperType": "ema"}
    assert build_attributes(config, "global-met-12x16") == {"finish": "high-gloss"}


def test_style_that_is_a_colour_is_dropped():
    assert "frame" not in build_attributes(FrameConfig(style="Dark Grey"), "global-cfpm-16x20")
    assert build_attributes(FrameConfig(style="Classic"), "global-cfpm-16x20") == {"frame": "classic"}


def test_sku_traits():
    assert sku_traits("global-slimcan-16x20")["canvas"]
    assert sku_traits("fra-box-gitd-610x610")["framed"]
    assert not sku_traits("global-met-16x20")["canvas"]
