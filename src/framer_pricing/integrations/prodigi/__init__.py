"""Prodigi integration: catalog quotes, products, and data transformation."""

from framer_pricing.integrations.prodigi.config import (
    validate_prodigi_config,
    get_prodigi_config_summary,
    PRODIGI_API_KEY,
    PRODIGI_ENVIRONMENT,
)
from framer_pricing.integrations.prodigi.client import (
    CatalogClient,
    CatalogAPIError,
    CatalogRateLimitError,
    CatalogNotFoundError,
    CatalogValidationError,
    CatalogTimeoutError,
    create_catalog_client,
)

__all__ = [
    "validate_prodigi_config",
    "get_prodigi_config_summary",
    "PRODIGI_API_KEY",
    "PRODIGI_ENVIRONMENT",
    "CatalogClient",
    "CatalogAPIError",
    "CatalogRateLimitError",
    "CatalogNotFoundError",
    "CatalogValidationError",
    "CatalogTimeoutError",
    "create_catalog_client",
]
