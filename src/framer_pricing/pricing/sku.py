"""
SKU Resolver

Derives the provider SKU for a cart item from its frame configuration.

Without a catalog, the resolver constructs the expected SKU pattern for the
product family and size ("global-slimcan-16x20"). With a catalog, each
candidate of the requested product type is scored against the
configuration and the best one wins:

    +50  exact size match (either orientation, within half an inch)
    +30  edge depth matches the requested 19mm / 38mm preference
    -20  edge depth contradicts it
    +25  canvas type matches the requested slim / standard / eco preference
    -15  canvas type contradicts it

Ties keep the earlier catalog entry. A best score below the configured
minimum raises SkuNotFound; the resolver never substitutes silently.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from framer_pricing.core.config import SKU_MIN_SCORE
from framer_pricing.core.errors import SkuNotFound
from framer_pricing.core.schema import CatalogProduct, FrameConfig

logger = logging.getLogger(__name__)


# =============================================================================
# SKU Families
# =============================================================================

EDGE_SLIM = "19mm"
EDGE_STANDARD = "38mm"

# (product type, canvas variant) -> SKU prefix
SKU_FAMILIES: Dict[Tuple[str, Optional[str]], str] = {
    ("canvas", "standard"): "global-can",
    ("canvas", "slim"): "global-slimcan",
    ("canvas", "eco"): "global-eco-can",
    ("framed-canvas", None): "global-fra-can",
    ("framed-print", None): "global-cfpm",
    ("acrylic", None): "global-acry",
    ("metal", None): "global-met",
    ("poster", None): "global-fap",
}

PRODUCT_TYPE_ALIASES: Dict[str, str] = {
    "canvas": "canvas",
    "stretched-canvas": "canvas",
    "framed-canvas": "framed-canvas",
    "framed-print": "framed-print",
    "framed": "framed-print",
    "print": "framed-print",
    "acrylic": "acrylic",
    "metal": "metal",
    "aluminium": "metal",
    "aluminum": "metal",
    "poster": "poster",
    "fine-art-print": "poster",
}

CANVAS_TYPES = ("standard", "slim", "eco")

# Tolerance for "exact" size matches, in inches
SIZE_TOLERANCE = 0.5

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)\s*(?:in|\"|'')?\s*$", re.I)

# Stored SKUs may carry an image-id suffix: fra-box-gitd-610x610-f7acd7d2
_IMAGE_ID_SUFFIX = re.compile(r"^(.+)-[a-f0-9]{8}$", re.I)


# =============================================================================
# Helpers
# =============================================================================

def extract_base_sku(sku: str) -> str:
    """Strip an 8-hex image-id suffix from a stored SKU."""
    match = _IMAGE_ID_SUFFIX.match(sku or "")
    if match:
        return match.group(1)
    return sku or ""


def normalize_product_type(product_type: Optional[str]) -> Optional[str]:
    if not product_type:
        return None
    key = re.sub(r"[\s_]+", "-", product_type.strip().lower())
    return PRODUCT_TYPE_ALIASES.get(key)


def parse_size(size: Optional[str]) -> Tuple[float, float]:
    """
    Parse a "WxH" size string in inches.

    Raises:
        ValueError: If the size is missing or not in WxH form
    """
    match = _SIZE_PATTERN.match(size or "")
    if not match:
        raise ValueError(f"Invalid size: {size!r}")
    width, height = float(match.group(1)), float(match.group(2))
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid size: {size!r}")
    return width, height


def _format_dimension(value: float) -> str:
    return str(int(value)) if value == int(value) else f"{value:g}"


def canvas_variant(frame_config: FrameConfig) -> str:
    """Requested canvas variant: explicit canvas type, else derived from the edge."""
    canvas_type = (frame_config.canvas_type or "").strip().lower()
    if canvas_type in CANVAS_TYPES:
        return canvas_type
    if (frame_config.edge or "").strip().lower() == EDGE_SLIM:
        return "slim"
    return "standard"


def is_slim_sku(sku: str) -> bool:
    lowered = sku.lower()
    return "slimcan" in lowered or "slim-can" in lowered


def is_eco_sku(sku: str) -> bool:
    return "eco" in sku.lower()


def build_sku_pattern(frame_config: FrameConfig) -> str:
    """
    Construct the expected provider SKU for a frame configuration.

    Raises:
        SkuNotFound: If the product type is unknown or the size is invalid
    """
    product_type = normalize_product_type(frame_config.product_type)
    if product_type is None:
        raise SkuNotFound(
            f"Unknown product type: {frame_config.product_type!r}",
            frame_config=frame_config,
        )

    try:
        width, height = parse_size(frame_config.size)
    except ValueError as e:
        raise SkuNotFound(str(e), frame_config=frame_config)

    variant = canvas_variant(frame_config) if product_type == "canvas" else None
    family = SKU_FAMILIES[(product_type, variant)]
    return f"{family}-{_format_dimension(width)}x{_format_dimension(height)}"


# =============================================================================
# Candidate Scoring
# =============================================================================

def _size_in_inches(product: CatalogProduct) -> Tuple[float, float]:
    if product.size_units.lower() == "cm":
        return product.width / 2.54, product.height / 2.54
    return product.width, product.height


def score_candidate(
    product: CatalogProduct,
    frame_config: FrameConfig,
    requested_size: Tuple[float, float],
) -> int:
    """Score one catalog candidate against a frame configuration."""
    score = 0
    width, height = _size_in_inches(product)
    req_width, req_height = requested_size

    if (
        abs(width - req_width) <= SIZE_TOLERANCE and abs(height - req_height) <= SIZE_TOLERANCE
    ) or (
        abs(width - req_height) <= SIZE_TOLERANCE and abs(height - req_width) <= SIZE_TOLERANCE
    ):
        score += 50

    edge = (frame_config.edge or "").strip().lower()
    product_edge = (product.edge or "").strip().lower()
    slim = is_slim_sku(product.sku)
    if edge == EDGE_SLIM:
        score += 30 if (slim or product_edge == EDGE_SLIM) else -20
    elif edge == EDGE_STANDARD:
        score += 30 if (not slim and product_edge in (EDGE_STANDARD, "")) else -20

    canvas_type = (frame_config.canvas_type or "").strip().lower()
    if canvas_type == "slim":
        score += 25 if slim else -15
    elif canvas_type == "eco":
        score += 25 if is_eco_sku(product.sku) else -15
    elif canvas_type == "standard":
        score += 25 if (not slim and not is_eco_sku(product.sku)) else -15

    return score


class SkuResolver:
    """
    Resolves frame configurations to provider SKUs.

    Args:
        catalog: Candidate products in catalog-list order. None means no
            catalog is available and SKU patterns are constructed instead.
        min_score: Candidates scoring below this are rejected
    """

    def __init__(
        self,
        catalog: Optional[Sequence[CatalogProduct]] = None,
        min_score: Optional[int] = None,
    ):
        self.catalog = list(catalog) if catalog is not None else None
        self.min_score = min_score if min_score is not None else SKU_MIN_SCORE

    def candidates_for(self, product_type: str) -> List[CatalogProduct]:
        if self.catalog is None:
            return []
        return [p for p in self.catalog if normalize_product_type(p.product_type) == product_type]

    def resolve(self, frame_config: FrameConfig) -> str:
        """
        Resolve the SKU for a frame configuration.

        Raises:
            SkuNotFound: If no candidate clears the minimum score
        """
        pattern = build_sku_pattern(frame_config)
        if self.catalog is None:
            return pattern

        product_type = normalize_product_type(frame_config.product_type)
        requested_size = parse_size(frame_config.size)
        candidates = self.candidates_for(product_type)
        if not candidates:
            raise SkuNotFound(
                f"No catalog products of type {product_type}",
                frame_config=frame_config,
            )

        best: Optional[CatalogProduct] = None
        best_score: Optional[int] = None
        for candidate in candidates:
            score = score_candidate(candidate, frame_config, requested_size)
            logger.debug(f"SKU candidate {candidate.sku} scored {score}")
            # strictly greater: ties keep the earlier catalog entry
            if best_score is None or score > best_score:
                best, best_score = candidate, score

        if best is None or best_score < self.min_score:
            raise SkuNotFound(
                f"No catalog SKU for {product_type} {frame_config.size} "
                f"(best score {best_score}, minimum {self.min_score})",
                frame_config=frame_config,
                best_score=best_score,
            )

        logger.info(f"Resolved {product_type} {frame_config.size} to {best.sku} (score {best_score})")
        return best.sku


def resolve_sku(
    frame_config: FrameConfig,
    catalog: Optional[Sequence[CatalogProduct]] = None,
    min_score: Optional[int] = None,
) -> str:
    """Convenience wrapper around SkuResolver.resolve()."""
    return SkuResolver(catalog=catalog, min_score=min_score).resolve(frame_config)
