"""
Product Catalog Manager

CLI entry point for querying and maintaining the catalog.
"""

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from src.models.rating import Rating
from src.orchestrator import ShopOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def _rating(text: str) -> Rating:
    try:
        return Rating.from_ordinal(int(text))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _price(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid price: {text}")


def _date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {text}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Product Catalog Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List all products in US English
  python main.py --locale en-US list

  # Add a review and save the catalog
  python main.py review 101 4 "Nice hot cup of tea"

  # Write a report for product 101
  python main.py report 101 --client web

  # Archive the catalog to a snapshot, then bring it back
  python main.py dump
  python main.py restore
        """
    )

    parser.add_argument(
        "--data-dir",
        default=str(settings.DATA_DIR),
        help=f"Product/review records directory (default: {settings.DATA_DIR})"
    )
    parser.add_argument(
        "--reports-dir",
        default=str(settings.REPORTS_DIR),
        help=f"Reports directory (default: {settings.REPORTS_DIR})"
    )
    parser.add_argument(
        "--temp-dir",
        default=str(settings.TEMP_DIR),
        help=f"Snapshot directory (default: {settings.TEMP_DIR})"
    )
    parser.add_argument(
        "--locale",
        default=settings.DEFAULT_LOCALE,
        help=f"Locale tag, one of {', '.join(settings.LOCALE_CURRENCIES)} (default: {settings.DEFAULT_LOCALE})"
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="Print products")
    list_cmd.add_argument("--min-rating", type=_rating, default=Rating.NOT_RATED)
    list_cmd.add_argument("--sort", choices=["id", "name", "price", "rating"], default="id")
    list_cmd.add_argument("--desc", action="store_true", help="Sort descending")

    commands.add_parser("discounts", help="Print discount totals per rating")

    report_cmd = commands.add_parser("report", help="Write a product report")
    report_cmd.add_argument("product_id", type=int)
    report_cmd.add_argument("--client", default="cli")

    create_cmd = commands.add_parser("create", help="Add a product and save")
    create_cmd.add_argument("product_id", type=int)
    create_cmd.add_argument("name")
    create_cmd.add_argument("price", type=_price)
    create_cmd.add_argument("--rating", type=_rating, default=Rating.NOT_RATED)
    create_cmd.add_argument("--best-before", type=_date, help="Makes the product perishable")

    review_cmd = commands.add_parser("review", help="Review a product and save")
    review_cmd.add_argument("product_id", type=int)
    review_cmd.add_argument("rating", type=_rating)
    review_cmd.add_argument("comments")

    commands.add_parser("dump", help="Archive the catalog to a snapshot and clear it")
    commands.add_parser("restore", help="Restore the latest snapshot and save it")
    commands.add_parser("demo", help="Run the Tea review demo")

    return parser


def run_command(args, orchestrator: ShopOrchestrator) -> int:
    """Execute one CLI command. Returns the process exit code."""
    catalog = orchestrator.catalog

    if args.command == "list":
        sort_keys = {
            "id": lambda p: p.id,
            "name": lambda p: p.name,
            "price": lambda p: p.price,
            "rating": lambda p: p.rating,
        }
        catalog.print_products(
            predicate=lambda p: p.rating >= args.min_rating,
            sort_key=sort_keys[args.sort],
            reverse=args.desc,
            locale=args.locale
        )
        return 0

    if args.command == "discounts":
        for stars, total in catalog.get_discounts(args.locale).items():
            print(f"{stars or '-'}\t{total}")
        return 0

    if args.command == "report":
        path = catalog.print_product_report(args.product_id, args.locale, args.client)
        if path is None:
            print(f"No report written for product {args.product_id}")
            return 1
        print(f"Report: {path}")
        return 0

    if args.command == "create":
        product = catalog.create_product(
            args.product_id, args.name, args.price, args.rating, args.best_before
        )
        if product is None:
            return 1
        return 0 if catalog.save_all_data() is not None else 1

    if args.command == "review":
        product = catalog.review_product(args.product_id, args.rating, args.comments)
        if product is None:
            print(f"Product {args.product_id} not found")
            return 1
        print(f"{product.name} is now rated {product.rating.stars}")
        return 0 if catalog.save_all_data() is not None else 1

    if args.command == "dump":
        path = catalog.dump_data()
        if path is None:
            return 1
        print(f"Snapshot: {path}")
        return 0

    if args.command == "restore":
        if not catalog.restore_data():
            return 1
        return 0 if catalog.save_all_data() is not None else 1

    if args.command == "demo":
        report = orchestrator.run_demo(args.locale)
        if report is None:
            return 1
        print(f"Report: {report}")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        orchestrator = ShopOrchestrator(
            data_dir=args.data_dir,
            reports_dir=args.reports_dir,
            temp_dir=args.temp_dir
        )
        orchestrator.start()
        sys.exit(run_command(args, orchestrator))

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Catalog command failed: {e}", exc_info=True)
        print(f"\n❌ Command failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
