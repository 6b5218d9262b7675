"""CLI entry point for the bookscout service."""

import argparse
import asyncio
import json
import logging
import sys

from bookscout.core.config import Settings
from bookscout.core.schemas import JobStatus
from bookscout.pipeline.jobs import JobPipeline
from bookscout.sources.bookdp.searcher import build_search_url


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="bookscout - find books for a topic, score them with an LLM, deliver results",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- serve subcommand ---
    serve_parser = subparsers.add_parser("serve", help="Run the job submission API")
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults + env)",
    )
    serve_parser.add_argument("--host", help="Override server.host")
    serve_parser.add_argument("--port", type=int, help="Override server.port")
    serve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- run subcommand ---
    run_parser = subparsers.add_parser("run", help="Run one topic in the foreground")
    run_parser.add_argument("topic", help="Topic to search for")
    run_parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults + env)",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without launching a browser",
    )
    run_parser.add_argument(
        "--export",
        choices=["json"],
        help="Print the full result in the given format (json)",
    )
    run_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def dry_run(settings: Settings, topic: str) -> None:
    """Print what would happen without actually scraping."""
    scraper = settings.scraper
    enrichment = settings.enrichment
    print(f"[DRY RUN] Topic '{topic.strip()}' on {scraper.base_url}")
    for page in range(1, scraper.pages_to_scrape + 1):
        print(f"  Page {page}: {build_search_url(scraper.base_url, topic.strip(), page)}")
    print(f"  Enrichment: {enrichment.provider} "
          f"(model={enrichment.model or 'default'}, batch={enrichment.batch_size}, "
          f"pause={enrichment.batch_delay}s)")
    print(f"  Webhook: {settings.delivery.webhook_url or 'not configured'}")
    print("[DRY RUN] No browser launched, no LLM calls made")


async def run(settings: Settings, topic: str, export_format: str | None) -> int:
    """Run one job to completion with the real gateways. Returns an exit code."""
    pipeline = JobPipeline.from_settings(settings)
    job = await pipeline.run(topic)
    print(f"\nJob {job.id} {job.status.value}: {job.message}")

    if job.status is not JobStatus.COMPLETED:
        return 1

    result = pipeline.store.get_result(job.id)
    if result is None:
        return 1

    meta = result.metadata
    print(f"  {meta.total_books} books, average price ${meta.average_price:.2f}, "
          f"average relevance {meta.average_relevance:.1f}")
    print(f"  Most relevant: {meta.most_relevant_book}")
    print(f"  Best value:    {meta.best_value_book}")

    if export_format == "json":
        print(f"\n{json.dumps(result.model_dump(mode='json', by_alias=True), indent=2)}")
    return 0


def serve(settings: Settings, host: str | None, port: int | None) -> None:
    import uvicorn

    from bookscout.api.app import create_app

    uvicorn.run(
        create_app(settings),
        host=host or settings.server.host,
        port=port or settings.server.port,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "serve":
        serve(settings, args.host, args.port)
        return

    if not args.topic.strip():
        print("Error: topic must not be empty", file=sys.stderr)
        sys.exit(2)

    if args.dry_run:
        dry_run(settings, args.topic)
    else:
        sys.exit(asyncio.run(run(settings, args.topic, args.export)))


if __name__ == "__main__":
    main()
