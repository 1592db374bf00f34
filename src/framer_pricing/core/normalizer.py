"""
Attribute Normalizer

Canonicalizes provider attribute mappings so that cart-side attributes and
quote-line attributes compare equal regardless of who produced them.

The provider is inconsistent about casing: the products endpoint returns
"ImageWrap" / "mountColor" while quotes echo "imagewrap" / "mountcolor",
and colour names arrive as "Dark Gray", "dark grey" or "dark-grey". Every
boundary where external attribute data enters the system runs through
normalize_attributes() once; matching code never does its own
case-insensitive lookups.

Usage:
    from framer_pricing.core.normalizer import normalize_attributes

    normalize_attributes({"MountColor": " Snow White ", "wrap": "ImageWrap"})
    # {"mountColor": "snow-white", "wrap": "imagewrap"}
"""

import re
from typing import Dict, Mapping, Optional


# Lower-cased key -> canonical key. Unknown keys pass through lower-cased.
KEY_ALIASES: Dict[str, str] = {
    "mountcolor": "mountColor",
    "mountcolour": "mountColor",
    "mount_color": "mountColor",
    "papertype": "paperType",
    "paper_type": "paperType",
    "substrateweight": "substrateWeight",
    "substrate_weight": "substrateWeight",
    "framecolour": "color",
    "framecolor": "color",
    "frame_color": "color",
    "colour": "color",
}

# Value aliases applied after lower-casing and whitespace collapsing
VALUE_ALIASES: Dict[str, str] = {
    "dark gray": "dark-grey",
    "dark grey": "dark-grey",
    "dark-gray": "dark-grey",
    "darkgrey": "dark-grey",
    "darkgray": "dark-grey",
    "light gray": "light-grey",
    "light grey": "light-grey",
    "light-gray": "light-grey",
    "lightgrey": "light-grey",
    "lightgray": "light-grey",
    "gray": "grey",
    "snow white": "snow-white",
    "off white": "off-white",
    "image wrap": "imagewrap",
    "mirror wrap": "mirrorwrap",
    "acrylic / perspex": "acrylic-perspex",
    "acrylic/perspex": "acrylic-perspex",
    "acrylic": "acrylic-perspex",
    "perspex": "acrylic-perspex",
    "float glass": "float-glass",
    "high gloss": "high-gloss",
    "1.4 mm": "1.4mm",
    "2.0 mm": "2.0mm",
    "2.4 mm": "2.4mm",
}

_WHITESPACE = re.compile(r"\s+")


def normalize_key(key: str) -> str:
    """Canonical form of an attribute key."""
    lowered = str(key).strip().lower()
    return KEY_ALIASES.get(lowered, lowered)


def normalize_value(value: Optional[str]) -> str:
    """Canonical form of an attribute value."""
    if value is None:
        return ""
    collapsed = _WHITESPACE.sub(" ", str(value).strip().lower())
    return VALUE_ALIASES.get(collapsed, collapsed)


def normalize_attributes(raw_attributes: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """
    Normalize an attribute mapping.

    Keys are lower-cased and aliased, values trimmed, lower-cased and
    aliased. Empty values are dropped. When two raw keys collapse onto the
    same canonical key ("mountColor" and "mountcolor"), the first non-empty
    value in sorted raw-key order wins, so the result never depends on dict
    insertion order.

    Idempotent: normalize_attributes(normalize_attributes(x)) == normalize_attributes(x).
    """
    normalized: Dict[str, str] = {}
    if not raw_attributes:
        return normalized

    for raw_key in sorted(raw_attributes, key=str):
        value = normalize_value(raw_attributes[raw_key])
        if not value:
            continue
        key = normalize_key(raw_key)
        if key not in normalized:
            normalized[key] = value

    return normalized


def attribute_key(attributes: Optional[Mapping[str, Optional[str]]]) -> tuple:
    """Hashable, order-independent key for a normalized attribute mapping."""
    return tuple(sorted(normalize_attributes(attributes).items()))
