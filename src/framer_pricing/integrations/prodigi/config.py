#!/usr/bin/env python3
"""
Prodigi Configuration for the catalog/quote client.

This module manages Prodigi API configuration, retry settings and the
product-type tables used to shape quote requests.
"""

import os
import sys
from typing import Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


# =============================================================================
# Prodigi API Configuration
# =============================================================================

PRODIGI_API_KEY: Optional[str] = os.getenv("PRODIGI_API_KEY")

# sandbox | production
PRODIGI_ENVIRONMENT: str = os.getenv("PRODIGI_ENVIRONMENT", "production")

PRODIGI_API_URLS: Dict[str, str] = {
    "sandbox": "https://api.sandbox.prodigi.com/v4.0",
    "production": "https://api.prodigi.com/v4.0",
}

# Explicit base URL wins over the environment table
PRODIGI_API_BASE_URL: str = os.getenv(
    "PRODIGI_API_BASE_URL",
    PRODIGI_API_URLS.get(PRODIGI_ENVIRONMENT, PRODIGI_API_URLS["production"]),
)


# =============================================================================
# Retry / Timeout
# =============================================================================

PRODIGI_TIMEOUT_SECONDS: float = float(os.getenv("PRODIGI_TIMEOUT_SECONDS", "30"))

# Total attempts per request, including the first one
PRODIGI_MAX_RETRIES: int = int(os.getenv("PRODIGI_MAX_RETRIES", "3"))

PRODIGI_RETRY_DELAY_SECONDS: float = float(os.getenv("PRODIGI_RETRY_DELAY_SECONDS", "1.0"))
PRODIGI_MAX_RETRY_DELAY_SECONDS: float = float(os.getenv("PRODIGI_MAX_RETRY_DELAY_SECONDS", "30"))

RETRYABLE_STATUS_CODES = (408, 429, 500, 502, 503, 504)


# =============================================================================
# Quote Defaults
# =============================================================================

SHIPPING_METHODS = ("Budget", "Standard", "Express", "Overnight")

DEFAULT_SHIPPING_METHOD: str = "Standard"

# Prodigi expects lowercase 'default' for quotes
DEFAULT_PRINT_AREA: str = "default"


# =============================================================================
# Validation
# =============================================================================

def validate_prodigi_config() -> None:
    """
    Validate that all required Prodigi configuration values are present.
    Raises SystemExit if any required values are missing.
    """
    errors = []

    if not PRODIGI_API_KEY:
        errors.append("PRODIGI_API_KEY environment variable is required")

    if PRODIGI_ENVIRONMENT not in PRODIGI_API_URLS:
        errors.append(
            f"PRODIGI_ENVIRONMENT must be one of {', '.join(PRODIGI_API_URLS)} "
            f"(got '{PRODIGI_ENVIRONMENT}')"
        )

    if PRODIGI_MAX_RETRIES < 1:
        errors.append("PRODIGI_MAX_RETRIES must be at least 1")

    if errors:
        print("Prodigi Configuration Error(s):", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        print("\nPlease set the required environment variables and try again.", file=sys.stderr)
        sys.exit(1)


def get_prodigi_config_summary() -> str:
    """
    Get a summary of the current Prodigi configuration (for logging).
    Sensitive values are masked.
    """
    key_masked = (
        f"{PRODIGI_API_KEY[:4]}...{PRODIGI_API_KEY[-4:]}"
        if PRODIGI_API_KEY and len(PRODIGI_API_KEY) > 8 else "Not set"
    )

    return f"""
Prodigi Client Configuration:
  API:
    - API Key: {key_masked}
    - Environment: {PRODIGI_ENVIRONMENT}
    - Base URL: {PRODIGI_API_BASE_URL}

  Requests:
    - Timeout: {PRODIGI_TIMEOUT_SECONDS}s
    - Max Attempts: {PRODIGI_MAX_RETRIES}
    - Retry Delay: {PRODIGI_RETRY_DELAY_SECONDS}s (cap {PRODIGI_MAX_RETRY_DELAY_SECONDS}s)
"""


if __name__ == "__main__":
    print("Validating Prodigi configuration...")
    validate_prodigi_config()
    print("Prodigi configuration is valid!")
    print(get_prodigi_config_summary())
