#!/usr/bin/env python3
"""
Shopify Order Export - Export orders as line-item CSV rows.

Usage:
    python run.py                                        # Export all orders
    python run.py --start-date 2024-03-01 --end-date 2024-03-31
    python run.py --status open                          # Filter by status
    python run.py --list-statuses                        # Show status values
    python run.py --check-connection                     # Verify credentials
    python run.py --debug                                # Enable debug output

Exit codes:
    0  export written
    1  configuration or API failure
    2  no orders found
"""

import sys
import argparse
import logging

from shopify_order_export import ExportConfig, ExportOrchestrator, OrderExportError, OrderQuery
from shopify_order_export.settings import ORDER_STATUSES

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_FOUND = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Shopify Order Export - Flatten orders into a line-item CSV"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--start-date", help="Earliest order creation date (inclusive, YYYY-MM-DD)")
    parser.add_argument("--end-date", help="Latest order creation date (inclusive, YYYY-MM-DD)")
    parser.add_argument(
        "--status",
        default="any",
        choices=[s["value"] for s in ORDER_STATUSES],
        help="Order status filter (default: any)",
    )
    parser.add_argument("--output-dir", help="Override OUTPUT_DIR")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--list-statuses", action="store_true", help="List order status values and exit")
    parser.add_argument("--check-connection", action="store_true", help="Verify store credentials and exit")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.list_statuses:
        for status in ORDER_STATUSES:
            print(f"{status['value']:<10} {status['label']}")
        return EXIT_OK

    # Show HTTP traffic from requests/urllib3 when --debug is set
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s'
        )
        logging.getLogger('urllib3').setLevel(logging.DEBUG)

    config = ExportConfig.from_env(args.env)
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.debug:
        config.debug = True

    try:
        query = OrderQuery(start_date=args.start_date, end_date=args.end_date, status=args.status)
    except ValueError as e:
        print(f"Invalid query: {e}")
        return EXIT_FAILED

    orchestrator = ExportOrchestrator(config)

    print(f"\n{'='*60}")
    print("SHOPIFY ORDER EXPORT")
    print("="*60)
    print(f"Store: {config.shop_name}")
    print(f"Status: {query.status}")
    orchestrator.print_proxy_status()

    if not orchestrator.validate_config():
        return EXIT_FAILED

    if args.check_connection:
        try:
            shop = orchestrator.client.get_shop()
        except OrderExportError as e:
            print(f"Connection failed: {e}")
            return EXIT_FAILED
        print(f"Connected to shop: {shop.get('name', config.shop_name)}")
        return EXIT_OK

    if orchestrator.folders.retention_days > 0:
        removed = orchestrator.folders.prune(config.debug)
        if removed:
            print(f"Removed {len(removed)} expired export folder(s)")

    results = orchestrator.run(query)
    orchestrator.print_summary(results)

    if results.get("success"):
        return EXIT_OK
    if results.get("not_found"):
        return EXIT_NOT_FOUND
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
