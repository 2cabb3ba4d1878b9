"""
Flex Reviews - Review aggregation and moderation

CLI entry point for serving the API and running queries offline.
"""

import argparse
import json
import logging
import sys

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


def add_query_arguments(parser: argparse.ArgumentParser) -> None:
    """Filter options shared by the query and export commands."""
    parser.add_argument("--provider", default="hostaway", choices=["hostaway", "google", "all"])
    parser.add_argument("--listing", help="Exact listing name (case-insensitive)")
    parser.add_argument("--q", help="Free-text search over guest, listing and review text")
    parser.add_argument("--category", help="Category name, e.g. cleanliness")
    parser.add_argument("--min", help="Minimum rating for --category")
    parser.add_argument("--type", help="Comma-separated review types")
    parser.add_argument("--channel", help="Comma-separated channels")
    parser.add_argument("--approved-only", action="store_true", help="Only approved reviews")
    parser.add_argument("--from", dest="date_from", help="Start date (YYYY-MM-DD), inclusive")
    parser.add_argument("--to", dest="date_to", help="End date (YYYY-MM-DD), inclusive")
    parser.add_argument("--status", help="Review status (default: published; 'all' for any)")
    parser.add_argument("--sort", choices=["date", "rating"])
    parser.add_argument("--order", choices=["asc", "desc"], default="desc")


def query_params(args: argparse.Namespace) -> dict:
    """Translate CLI options into API-style query parameters."""
    params = {
        "listing": args.listing,
        "q": args.q,
        "category": args.category,
        "min": args.min,
        "type": args.type,
        "channel": args.channel,
        "approvedOnly": "true" if args.approved_only else None,
        "from": args.date_from,
        "to": args.date_to,
        "status": args.status,
        "sort": args.sort,
        "order": args.order,
        "page": getattr(args, "page", None),
        "limit": getattr(args, "limit", None),
    }
    return {k: v for k, v in params.items() if v is not None}


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Flex Reviews - review aggregation and moderation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the API
  python main.py serve --port 8000

  # Top-rated published reviews for one listing
  python main.py query --listing "Studio - Canary Wharf Dockside" --sort rating

  # Export cleanliness >= 8 reviews to CSV
  python main.py export --category cleanliness --min 8 --output output/clean.csv

  # Approve a review for the public page
  python main.py approve 7003

Note: Set HOSTAWAY_ACCOUNT_ID / HOSTAWAY_API_KEY and GOOGLE_MAPS_API_KEY for
live data; otherwise bundled fixtures are served.
        """
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.API_HOST)
    serve.add_argument("--port", type=int, default=settings.API_PORT)

    query = subparsers.add_parser("query", help="Print one page of query results as JSON")
    add_query_arguments(query)
    query.add_argument("--page", help="1-indexed page (default: 1)")
    query.add_argument("--limit", help=f"Page size 1-{settings.MAX_PAGE_LIMIT}")

    export = subparsers.add_parser("export", help="Export all matching reviews to CSV")
    add_query_arguments(export)
    export.add_argument("--output", default=str(settings.OUTPUT_ROOT / "reviews.csv"))

    approve = subparsers.add_parser("approve", help="Set the approval flag of a review")
    approve.add_argument("review_id")
    approve.add_argument("--revoke", action="store_true", help="Hide instead of approve")

    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.command == "serve":
            import uvicorn
            from flex_reviews.api.server import create_app

            logger.info(f"Starting API on {args.host}:{args.port}")
            uvicorn.run(create_app(), host=args.host, port=args.port)
            return

        from flex_reviews.models.review import parse_review_id
        from flex_reviews.orchestrator import ReviewService

        service = ReviewService.from_settings()

        if args.command == "query":
            result, source = service.query(query_params(args), provider=args.provider)
            payload = result.to_dict()
            payload["source"] = source
            print(json.dumps(payload, indent=2, ensure_ascii=False))

        elif args.command == "export":
            output_path = service.export(query_params(args), args.output, provider=args.provider)
            print(f"Exported reviews to {output_path}")

        elif args.command == "approve":
            result = service.set_approval(parse_review_id(args.review_id), not args.revoke)
            print(json.dumps(result))

        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"\n❌ Command failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
