#!/usr/bin/env python3
"""
framer-pricing command line.

Prices a cart JSON file against the live Prodigi catalog and prints the
result as JSON.

Usage:
    framer-pricing quote cart.json --country US
    framer-pricing quote cart.json --country GB --method Express --currency GBP
    framer-pricing shipping cart.json --address address.json
    framer-pricing config
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List

from framer_pricing.core.config import LOG_LEVEL, get_config_summary, validate_config
from framer_pricing.core.errors import FramerPricingError
from framer_pricing.core.schema import CartItem, ShippingAddress
from framer_pricing.integrations.currency import CurrencyService
from framer_pricing.integrations.prodigi import (
    CatalogAPIError,
    CatalogClient,
    get_prodigi_config_summary,
    validate_prodigi_config,
)
from framer_pricing.integrations.prodigi.config import SHIPPING_METHODS
from framer_pricing.pricing import PricingAggregator
from framer_pricing.shipping import ShippingAggregator, summarize_shipping
from framer_pricing.user_errors import get_user_friendly_error

logger = logging.getLogger(__name__)


def load_cart(path: str) -> List[CartItem]:
    """Load cart items from a JSON file (a list, or {"items": [...]})."""
    with open(path, "r") as f:
        data = json.load(f)
    items = data.get("items", []) if isinstance(data, dict) else data
    return [CartItem.from_dict(item, index) for index, item in enumerate(items)]


def load_address(path: str) -> ShippingAddress:
    with open(path, "r") as f:
        return ShippingAddress.from_dict(json.load(f))


async def run_quote(args: argparse.Namespace) -> Dict[str, Any]:
    items = load_cart(args.cart)
    async with CatalogClient() as catalog, CurrencyService() as currency_service:
        aggregator = PricingAggregator(catalog, currency_service)
        result = await aggregator.calculate_pricing(
            items,
            args.country,
            shipping_method=args.method,
            currency=args.currency,
        )
    return result.to_dict()


async def run_shipping(args: argparse.Namespace) -> Dict[str, Any]:
    items = load_cart(args.cart)
    address = load_address(args.address)
    async with CatalogClient() as catalog, CurrencyService() as currency_service:
        aggregator = ShippingAggregator(catalog, currency_service, guaranteed=args.guaranteed)
        options = await aggregator.calculate_shipping(items, address, currency=args.currency)
    return summarize_shipping(options, max_days=args.max_days).to_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Art Framer pricing and shipping quotes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s quote cart.json --country US
  %(prog)s quote cart.json --country DE --method Express --currency EUR
  %(prog)s shipping cart.json --address address.json
""",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Reconciled pricing for a cart")
    quote.add_argument("cart", help="Path to cart JSON")
    quote.add_argument("--country", required=True, help="Destination ISO country code")
    quote.add_argument("--method", default="Standard", choices=SHIPPING_METHODS, help="Shipping method")
    quote.add_argument("--currency", help="Result currency (default: quote currency)")

    shipping = subparsers.add_parser("shipping", help="Shipping options for a cart")
    shipping.add_argument("cart", help="Path to cart JSON")
    shipping.add_argument("--address", required=True, help="Path to shipping address JSON")
    shipping.add_argument("--currency", help="Result currency (default: quote currency)")
    shipping.add_argument("--max-days", type=int, help="Delivery threshold for the recommended method")
    shipping.add_argument(
        "--guaranteed",
        action="store_true",
        help="Fall back to estimates when the provider call fails",
    )

    subparsers.add_parser("config", help="Validate and print the configuration")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # JSON goes to stdout, logs to stderr
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    validate_config()
    validate_prodigi_config()

    if args.command == "config":
        print(get_config_summary())
        print(get_prodigi_config_summary())
        return 0

    runner = run_quote if args.command == "quote" else run_shipping
    try:
        output = asyncio.run(runner(args))
    except (FramerPricingError, CatalogAPIError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(json.dumps({"error": get_user_friendly_error(e).to_dict()}, indent=2))
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
