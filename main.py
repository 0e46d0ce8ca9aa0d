"""
ReviewSense - Review Opinion Reports

CLI entry point for ingesting reviews and generating opinion reports.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from reviewsense.orchestrator import ReportOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("reviewsense.log")
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ReviewSense - Opinion reports from user reviews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Track a product
  python main.py products add 1091500 "Cyberpunk 2077"

  # Ingest a saved Steam appreviews response
  python main.py ingest 1091500 --payload reviews.json

  # Ingest synthetic reviews for a demo
  python main.py ingest 1091500 --mock

  # Generate (or read the cached) report
  python main.py report 1091500 --refresh

  # Export the 30-day positive rate history
  python main.py history 1091500 --target-date 2024-07-01

Note: Set GOOGLE_API_KEY to enable AI summaries; without it reports are rule-based.
        """
    )

    parser.add_argument(
        "--data-root",
        default=str(settings.DATA_ROOT),
        help=f"Data directory (default: {settings.DATA_ROOT})"
    )
    parser.add_argument(
        "--registry-path",
        default=str(settings.REGISTRY_PATH),
        help="Path to product registry JSON"
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Classify and store reviews")
    ingest.add_argument("product_id", help="Steam appid")
    source = ingest.add_mutually_exclusive_group(required=True)
    source.add_argument("--payload", help="Path to a Steam appreviews JSON response")
    source.add_argument("--mock", action="store_true", help="Generate synthetic reviews")

    report = subparsers.add_parser("report", help="Print the opinion report as JSON")
    report.add_argument("product_id", help="Steam appid")
    report.add_argument("--refresh", action="store_true", help="Ignore the 1 hour cache")

    products = subparsers.add_parser("products", help="Manage tracked products")
    product_actions = products.add_subparsers(dest="action", required=True)
    add = product_actions.add_parser("add", help="Track a product")
    add.add_argument("product_id")
    add.add_argument("name")
    product_actions.add_parser("list", help="List tracked products")
    remove = product_actions.add_parser("remove", help="Stop tracking and delete data")
    remove.add_argument("product_id")

    history = subparsers.add_parser("history", help="Export positive rate history to CSV")
    history.add_argument("product_id")
    history.add_argument(
        "--target-date",
        default=date.today().isoformat(),
        help="Last day of the window (YYYY-MM-DD, default: today)"
    )
    history.add_argument(
        "--window-days",
        type=int,
        default=settings.REPORT_RETENTION_DAYS,
        help=f"Number of days to include (default: {settings.REPORT_RETENTION_DAYS})"
    )

    return parser


def run(args: argparse.Namespace) -> int:
    orchestrator = ReportOrchestrator(
        api_key=settings.GOOGLE_API_KEY,
        data_root=args.data_root,
        registry_path=args.registry_path,
        use_mock_data=args.mock if args.command == "ingest" else settings.USE_MOCK_DATA
    )

    if args.command == "ingest":
        payload = None
        if args.payload:
            with open(args.payload, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        count = orchestrator.ingest(args.product_id, payload)
        print(f"Ingested {count} reviews for {args.product_id}")

    elif args.command == "report":
        report, cached = asyncio.run(
            orchestrator.get_report(args.product_id, force_refresh=args.refresh)
        )
        output = {"success": True, "cached": cached, "report": report.to_dict()}
        print(json.dumps(output, indent=2, ensure_ascii=False))

    elif args.command == "products":
        if args.action == "add":
            product = orchestrator.add_product(args.product_id, args.name)
            print(f"Tracking {product.product_id} - {product.name}")
        elif args.action == "list":
            for product in orchestrator.registry.list_products():
                status = "enabled" if product.enabled else "disabled"
                print(f"{product.product_id}\t{product.name}\t{status}\t{product.created_at}")
        elif args.action == "remove":
            if not orchestrator.remove_product(args.product_id):
                print(f"Product {args.product_id} was not tracked; stored data removed")
                return 1
            print(f"Removed {args.product_id}")

    elif args.command == "history":
        output_path = orchestrator.export_history(
            args.product_id, args.target_date, args.window_days
        )
        print(f"History table: {output_path}")
        print(f"Metadata: {output_path.replace('.csv', '_metadata.json')}")

    return 0


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if not settings.GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set, reports will use rule-based summaries only")

    try:
        sys.exit(run(args))

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)

    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        print(f"\n❌ {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"\n❌ Command failed: {e}")
        print("Check reviewsense.log for details")
        sys.exit(1)


if __name__ == "__main__":
    main()


# Design Rationale and Trade-offs:
#
# 1. Why argparse subcommands instead of one flag-driven command?
#    - ingest, report, products and history take unrelated arguments
#    - Each subcommand gets its own --help
#    - Trade-off: Slightly longer parser setup
#
# 2. Why print the report as JSON?
#    - Same shape as Report.to_dict(), easy to pipe into jq or a dashboard
#    - Trade-off: Not pretty for humans reading a terminal
#
# 3. Why does an explicit --payload ignore REVIEWSENSE_MOCK_DATA?
#    - The command line states the source; the environment only sets defaults
#
# 4. Why exit codes (0 for success, 1 for failure)?
#    - Shell scripting and cron integration
#    - Trade-off: None
