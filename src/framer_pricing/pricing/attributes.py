"""
Attribute Builder

Derives provider quote attributes from a frame configuration using SKU
heuristics, for callers that have no product-attribute listing at hand.
The output always passes through normalize_attributes(), so it compares
equal to the attributes echoed on quote lines.
"""

import logging
from typing import Dict, Optional

from framer_pricing.core.normalizer import normalize_attributes
from framer_pricing.core.schema import FrameConfig

logger = logging.getLogger(__name__)


COLOR_NAMES = ("black", "white", "brown", "natural", "gold", "silver", "dark grey", "light grey")

DEFAULT_CANVAS_WRAP = "ImageWrap"
DEFAULT_PRINT_FINISH = "high gloss"


def _is_set(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() != "none"


def sku_traits(sku: Optional[str]) -> Dict[str, bool]:
    """Product family flags guessed from a SKU."""
    lowered = (sku or "").lower()
    return {
        "canvas": "can-" in lowered or "canvas" in lowered or "slimcan" in lowered,
        "framed": (
            "-fra-" in lowered
            or "-frame" in lowered
            or "-box-" in lowered
            or lowered.startswith("fra-")
            or "cfpm" in lowered
        ),
        "metal": "met-" in lowered or "metal" in lowered,
        "acrylic": "acr-" in lowered or "acry-" in lowered or "acrylic" in lowered,
        "paper": (
            "pap-" in lowered
            or "fap-" in lowered
            or "poster" in lowered
            or "paper" in lowered
            or "fineart" in lowered
        ),
    }


def looks_like_color(value: str) -> bool:
    lowered = value.strip().lower()
    return any(color in lowered for color in COLOR_NAMES)


def build_attributes(frame_config: Optional[FrameConfig], sku: Optional[str]) -> Dict[str, str]:
    """
    Build normalized quote attributes for one cart item.

    Args:
        frame_config: The item's frame configuration
        sku: The resolved provider SKU (drives the product-family heuristics)

    Returns:
        Normalized attribute mapping
    """
    if frame_config is None:
        return {}

    traits = sku_traits(sku)
    canvas = traits["canvas"]
    attributes: Dict[str, Optional[str]] = {}

    # Frame colour only for framed products; rolled/stretched canvas has none
    if _is_set(frame_config.color) and (not canvas or traits["framed"]):
        attributes["color"] = frame_config.color

    if canvas:
        attributes["wrap"] = frame_config.wrap if _is_set(frame_config.wrap) else DEFAULT_CANVAS_WRAP

    if not canvas and _is_set(frame_config.glaze):
        glaze = frame_config.glaze
        attributes["glaze"] = "Acrylic / Perspex" if glaze.strip().lower() == "acrylic" else glaze

    if not canvas and _is_set(frame_config.mount):
        attributes["mount"] = frame_config.mount
        if _is_set(frame_config.mount_color):
            attributes["mountColor"] = frame_config.mount_color

    if traits["metal"] or traits["acrylic"]:
        finish = frame_config.finish if _is_set(frame_config.finish) else DEFAULT_PRINT_FINISH
        attributes["finish"] = finish

    if traits["paper"] and _is_set(frame_config.paper_type):
        attributes["paperType"] = frame_config.paper_type

    if not canvas and _is_set(frame_config.edge):
        attributes["edge"] = frame_config.edge

    if _is_set(frame_config.style):
        if looks_like_color(frame_config.style):
            logger.debug(f"Dropping frame style {frame_config.style!r}: looks like a colour")
        else:
            attributes["frame"] = frame_config.style

    return normalize_attributes(attributes)
